#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (C) 2022-2022 Riku Block
# All rights reserved.
#
# This file is part of XScan.

from concurrent.futures import ThreadPoolExecutor

import xscan.db

from conftest import (
    ALICE,
    TARGET,
)


def make_record(tx_hash: str, block_number: int = 990) -> dict:
    return {
        "hash": tx_hash,
        "blockNumber": block_number,
        "timestamp": 1600000990,
        "addressFrom": ALICE,
        "addressTo": TARGET,
        "value": "1000000000000000000",
        "gasUsed": "21000",
        "gasPrice": "25000000000",
        "data": "0x",
        "status": "success",
        "transactionType": "contract_interaction",
    }


def test_progress_mark_processed(progress: xscan.db.ProgressStore) -> None:
    assert not progress.is_processed(10)
    assert progress.get_last_processed() == 0

    assert progress.mark_processed(10)
    assert progress.is_processed(10)

    # upsert, refreshes the timestamp
    assert not progress.mark_processed(10)
    assert progress.count() == 1


def test_progress_last_processed(progress: xscan.db.ProgressStore) -> None:
    for height in (5, 12, 7):
        progress.mark_processed(height)

    assert progress.get_last_processed() == 12
    assert progress.count() == 3
    assert not progress.is_processed(6)


def test_save_transaction(store: xscan.db.TransactionStore) -> None:
    record = make_record("0xaa")

    assert store.save_transaction(record)

    tx = store.get_transaction("0xaa")
    assert tx.blockNumber == 990
    assert tx.addressFrom == ALICE
    assert tx.addressTo == TARGET
    assert tx.value == "1000000000000000000"
    assert tx.transactionType == "contract_interaction"
    assert tx.contractAddress is None

    assert store.get_transaction("0xbb") is None


def test_save_transaction_duplicate(store: xscan.db.TransactionStore) -> None:
    assert store.save_transaction(make_record("0xaa"))

    # first write wins, no update and no error
    record = make_record("0xaa", block_number=991)
    assert not store.save_transaction(record)
    assert store.get_transaction("0xaa").blockNumber == 990


def test_save_transaction_concurrent(store: xscan.db.TransactionStore) -> None:
    record = make_record("0xaa")

    with ThreadPoolExecutor(max_workers=4) as executor:
        results = list(executor.map(store.save_transaction, [record] * 8))

    assert results.count(True) == 1
    assert results.count(False) == 7


def test_save_token(store: xscan.db.TransactionStore) -> None:
    record = {
        "address": "0x5e2e5fbc0fc3dc6ff8e1e8b8a7f7e6b43ad8f4c1",
        "name": "SonicX Token",
        "symbol": "SNX",
        "decimals": 18,
        "creationTx": "0xcc",
        "creator": ALICE,
        "isSonicXToken": True,
    }

    assert store.save_token(record)
    assert not store.save_token(record)

    token = store.get_token("0x5E2E5FBC0FC3DC6FF8E1E8B8A7F7E6B43AD8F4C1")
    assert token.symbol == "SNX"
    assert token.decimals == 18
    assert token.isSonicXToken
