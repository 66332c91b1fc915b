#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (C) 2022-2022 Riku Block
# All rights reserved.
#
# This file is part of XScan.

from typing import (
    Any,
    Optional,
)

import abc
import logging

from xscan.types import (
    Block,
    Receipt,
    Transaction,
)

log = logging.getLogger(__name__)


class LedgerReader(abc.ABC):
    """
    Ledger reader base class

    Responsible for:
    - fetch blocks, transactions and receipts from the chain
    - hide representation quirks of the upstream source (e.g. blocks that only list transaction hashes)
    - convert upstream data into the normalized ``xscan.types`` objects
    - perform read-only contract calls

    Error contract:
    - ``UpstreamUnavailable`` when the source cannot be reached at the connection level
    - ``TransientFetchFailure`` for any other failed lookup
    - ``ContractCallError`` when a read-only call reverts or returns undecodable output
    - ``None`` (not an error) when the requested object does not exist (yet)

    Note: A reader never writes to durable state.
    """

    @abc.abstractmethod
    def latest_height(self) -> int:
        """
        Current chain head height

        :return:
        """
        raise NotImplementedError

    @abc.abstractmethod
    def get_block(self, height: int, include_transactions: bool = True) -> Optional[Block]:
        """
        Fetch a block by height.

        Implementations are expected to:
        - return ``None`` for heights beyond the current head
        - resolve hash-only transaction lists into full ``Transaction`` objects, keeping the original order
        - drop (and log) transactions that fail to resolve instead of failing the whole block
        - backfill ``block_number`` and ``timestamp`` of every returned transaction

        :param height: block height
        :param include_transactions: resolve the transactions of the block
        :return:
        """
        raise NotImplementedError

    @abc.abstractmethod
    def get_transaction(self, tx_hash: str) -> Optional[Transaction]:
        raise NotImplementedError

    @abc.abstractmethod
    def get_receipt(self, tx_hash: str) -> Optional[Receipt]:
        raise NotImplementedError

    @abc.abstractmethod
    def has_code(self, address: str) -> bool:
        """
        Check whether a contract is deployed at ``address``

        :param address: account address
        :return:
        """
        raise NotImplementedError

    @abc.abstractmethod
    def call(self, address: str, function: str, *args: Any) -> Any:
        """
        Invoke a read-only (view) function of the minimal token interface on ``address``.

        :param address: contract address
        :param function: function name (e.g. 'name', 'symbol', 'decimals')
        :param args: function arguments
        :return: decoded return value
        """
        raise NotImplementedError
