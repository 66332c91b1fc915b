#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (C) 2022-2022 Riku Block
# All rights reserved.
#
# This file is part of XScan.

from typing import (
    List,
    Optional,
)

import enum
from dataclasses import (
    dataclass,
    field,
    replace,
)


class ReceiptStatus(enum.Enum):
    UNKNOWN = "unknown"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class Transaction(object):
    """
    Normalized transaction as returned by a ledger reader.

    Note: A missing ``to`` address denotes a contract creation transaction.
    Note: Numeric fields are kept as python integers (arbitrary precision), ``None`` if unknown.

    Attributes:
        hash: 0x prefixed transaction hash
        from_: sender address
        to: recipient address
        value: transferred amount in wei
        gas_price: gas price in wei
        gas_limit: gas limit ("gas" field)
        input: 0x prefixed call data or creation bytecode
        block_number: height of the including block
        timestamp: unix timestamp of the including block
    """
    hash: Optional[str]
    from_: Optional[str] = None
    to: Optional[str] = None
    value: Optional[int] = None
    gas_price: Optional[int] = None
    gas_limit: Optional[int] = None
    input: str = "0x"
    block_number: Optional[int] = None
    timestamp: Optional[int] = None

    @property
    def is_creation(self) -> bool:
        return not self.to

    def backfill(self, block_number: Optional[int], timestamp: Optional[int]) -> "Transaction":
        """
        Return a copy with missing block information filled in.

        :param block_number: height of the including block
        :param timestamp: timestamp of the including block
        :return:
        """
        return replace(
            self,
            block_number=self.block_number if self.block_number is not None else block_number,
            timestamp=self.timestamp if self.timestamp is not None else timestamp,
        )


@dataclass(frozen=True)
class Log(object):
    address: Optional[str]
    log_index: Optional[int] = None
    topics: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Receipt(object):
    """
    Post execution record of a transaction

    Attributes:
        transaction_hash: hash of the owning transaction
        status: execution status
        gas_used: consumed gas
        contract_address: address of the created contract (contract creation only)
        logs: emitted event logs in order
    """
    transaction_hash: str
    status: ReceiptStatus = ReceiptStatus.UNKNOWN
    gas_used: Optional[int] = None
    contract_address: Optional[str] = None
    logs: List[Log] = field(default_factory=list)


@dataclass(frozen=True)
class Block(object):
    number: int
    hash: Optional[str] = None
    timestamp: Optional[int] = None
    transactions: List[Transaction] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"Block(number={self.number} hash={self.hash} transactions={len(self.transactions)})"


@dataclass(frozen=True)
class TokenInfo(object):
    """
    Result of a successful token capability probe
    """
    address: str
    name: str
    symbol: str
    decimals: int


@dataclass(frozen=True)
class TokenDetection(object):
    """
    A contract creation transaction that deployed a token contract

    Attributes:
        token: probed token information
        transaction: the creation transaction
        receipt: receipt of the creation transaction
        affiliated: result of the affiliation rule
    """
    token: TokenInfo
    transaction: Transaction
    receipt: Receipt
    affiliated: bool
