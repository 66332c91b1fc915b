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

import logging

import xscan.cache
from xscan.types import (
    Block,
    Receipt,
    Transaction,
)
from .base import LedgerReader

log = logging.getLogger(__name__)


class LedgerReader_Cached(LedgerReader):
    """
    Wraps another reader and memoizes receipts.

    The filter, the token classifier and the record builder may all need the receipt of the same
    transaction while a height is scanned; with this wrapper it is fetched once. The controller
    calls ``reset()`` after every height.
    """

    def __init__(self, reader: LedgerReader, cache: Optional[xscan.cache.Cache] = None) -> None:
        self._reader = reader
        self._cache = cache if cache is not None else xscan.cache.Cache_Memory()

    @property
    def reader(self) -> LedgerReader:
        return self._reader

    def reset(self) -> None:
        self._cache.flush()

    def latest_height(self) -> int:
        return self._reader.latest_height()

    def get_block(self, height: int, include_transactions: bool = True) -> Optional[Block]:
        return self._reader.get_block(height, include_transactions)

    def get_transaction(self, tx_hash: str) -> Optional[Transaction]:
        return self._reader.get_transaction(tx_hash)

    def get_receipt(self, tx_hash: str) -> Optional[Receipt]:
        return self._cache.get_or_set(f"_receipt_{tx_hash}", lambda: self._reader.get_receipt(tx_hash))

    def has_code(self, address: str) -> bool:
        return self._reader.has_code(address)

    def call(self, address: str, function: str, *args: Any) -> Any:
        return self._reader.call(address, function, *args)
