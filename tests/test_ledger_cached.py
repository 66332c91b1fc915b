#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (C) 2022-2022 Riku Block
# All rights reserved.
#
# This file is part of XScan.

import pytest

import xscan.ledger
from xscan.exceptions import TransientFetchFailure

from conftest import (
    TARGET,
    make_receipt,
    make_tx,
)
from memory_ledger import LedgerReader_Memory


def test_cached_receipt(ledger: LedgerReader_Memory) -> None:
    tx = make_tx(10, 0, to=TARGET)
    ledger.add_receipt(make_receipt(tx, TARGET))

    cached = xscan.ledger.LedgerReader_Cached(ledger)

    assert cached.get_receipt(tx.hash) == cached.get_receipt(tx.hash)
    assert ledger.requests["get_receipt"] == 1

    cached.reset()
    cached.get_receipt(tx.hash)
    assert ledger.requests["get_receipt"] == 2


def test_cached_failure_not_stored(ledger: LedgerReader_Memory) -> None:
    tx = make_tx(10, 0, to=TARGET)
    ledger.add_receipt(make_receipt(tx))
    ledger.fail_receipt(tx.hash)

    cached = xscan.ledger.LedgerReader_Cached(ledger)

    for _ in range(2):
        with pytest.raises(TransientFetchFailure):
            cached.get_receipt(tx.hash)

    assert ledger.requests["get_receipt"] == 2


def test_cached_delegates(ledger: LedgerReader_Memory) -> None:
    ledger.set_head(77)
    ledger.add_contract(TARGET, symbol="SNX")

    cached = xscan.ledger.LedgerReader_Cached(ledger)

    assert cached.reader is ledger
    assert cached.latest_height() == 77
    assert cached.get_block(77) is None
    assert cached.has_code(TARGET)
    assert cached.call(TARGET, "symbol") == "SNX"
