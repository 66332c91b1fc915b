#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (C) 2022-2022 Riku Block
# All rights reserved.
#
# This file is part of XScan.

import enum

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    SmallInteger,
    String,
    Text,
)

from .base import (
    Base,
    BaseModelCreated,
)

# Field names mirror the stored record format of the original scanner (camelCase). Amounts are
# kept as decimal strings, wei values easily exceed 64 bit integers.

SENTINEL_UNKNOWN = "Unknown"
SENTINEL_CONTRACT_CREATION = "Contract Creation"


@enum.unique
class TransactionType(str, enum.Enum):
    CONTRACT_INTERACTION = "contract_interaction"
    TOKEN_CREATION = "token_creation"


class Transaction(BaseModelCreated, Base):
    """
    Store a matched transaction (unique by hash)
    """
    __tablename__ = "transaction"

    hash = Column(String(length=66), nullable=False, unique=True)
    blockNumber = Column(BigInteger, nullable=False, index=True)
    timestamp = Column(BigInteger, nullable=False)

    # "from"/"to" are reserved words, hence the attribute names
    addressFrom = Column("from", String(length=42), nullable=False)
    addressTo = Column("to", String(length=42), nullable=False)

    value = Column(String(length=78), nullable=False)
    gasUsed = Column(String(length=78), nullable=False)
    gasPrice = Column(String(length=78), nullable=False)
    data = Column(Text, nullable=False)
    status = Column(String(length=16), nullable=False)
    transactionType = Column(String(length=32), nullable=False)

    # token creation only
    contractAddress = Column(String(length=42))
    isSonicXToken = Column(Boolean)

    def __repr__(self) -> str:
        return f"Transaction(hash={self.hash} blockNumber={self.blockNumber} type={self.transactionType})"


class Token(BaseModelCreated, Base):
    """
    Store token contract information (unique by contract address)
    """
    __tablename__ = "token"

    # lower case contract address used as unique identifier
    address = Column(String(length=42), nullable=False, unique=True)

    # mirrored from the smart contract
    name = Column(String(length=256), nullable=False)
    symbol = Column(String(length=64), nullable=False)
    decimals = Column(SmallInteger, nullable=False)

    creationTx = Column(String(length=66), nullable=False)
    creator = Column(String(length=42), nullable=False)
    isSonicXToken = Column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"Token(address={self.address} symbol={self.symbol})"
