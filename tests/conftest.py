#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (C) 2022-2022 Riku Block
# All rights reserved.
#
# This file is part of XScan.

from typing import (
    Callable,
    Iterator,
    Optional,
)

import logging
import pytest

from pathlib import Path

import xscan.db
import xscan.scan
from xscan.config import CONFIG as C
from xscan.types import (
    Block,
    Log,
    Receipt,
    ReceiptStatus,
    Transaction,
)

from memory_ledger import LedgerReader_Memory

log = logging.getLogger(__name__)

# addresses used across the chain scenarios
TARGET = "0xd7538cabbf8605bde1f4901b47b8d42c61de0367"
ROUTER = "0xe54ca86531e17ef3616d22ca28b0d458b6c89106"
ALICE = "0x3ef0e6f5ab5d8b5d2a0f0b4ca1d3c3a1f0e0b9ac"
BOB = "0x9c8a4f0e2c6ff5e3c0f1a8b7b6d2ce8f3d1a7b42"


def pytest_configure(config):
    logging.basicConfig(level=C["LOG_LEVEL"], format=C["LOG_FORMAT"], datefmt=C["LOG_DATE_FORMAT"])


@pytest.fixture(scope="function")
def dbm(tmp_path: Path) -> Iterator[xscan.db.FusionSQL]:
    """
    SQlite database for testing

    Note: a file database (instead of ':memory:') is shared by the connections of all worker threads.
    """
    with xscan.db.FusionSQL(conn=f"sqlite:///{tmp_path / 'xscan.db'}", verbose=C["DB_DEBUG"]) as db:
        db.create_all()
        yield db


@pytest.fixture(scope="function")
def progress(dbm: xscan.db.FusionSQL) -> xscan.db.ProgressStore:
    return xscan.db.ProgressStore(dbm)


@pytest.fixture(scope="function")
def store(dbm: xscan.db.FusionSQL) -> xscan.db.TransactionStore:
    return xscan.db.TransactionStore(dbm)


@pytest.fixture(scope="function")
def ledger() -> LedgerReader_Memory:
    return LedgerReader_Memory()


@pytest.fixture(scope="function")
def rule() -> xscan.scan.MarkerAffiliationRule:
    return xscan.scan.MarkerAffiliationRule(markers=["sonicx", "sonic", "sonix"])


def make_hash(height: int, index: int) -> str:
    return "0x" + f"{height:032x}{index:032x}"


def make_tx(
    height: int,
    index: int,
    from_: Optional[str] = ALICE,
    to: Optional[str] = BOB,
    value: int = 0,
    input: str = "0x",
) -> Transaction:
    return Transaction(
        hash=make_hash(height, index),
        from_=from_,
        to=to,
        value=value,
        gas_price=25_000_000_000,
        gas_limit=21_000,
        input=input,
    )


def make_receipt(tx: Transaction, *emitters: str, contract_address: Optional[str] = None) -> Receipt:
    return Receipt(
        transaction_hash=tx.hash,
        status=ReceiptStatus.SUCCESS,
        gas_used=21_000,
        contract_address=contract_address,
        logs=[Log(address=a, log_index=i) for i, a in enumerate(emitters)],
    )


@pytest.fixture(scope="function")
def chain(ledger: LedgerReader_Memory) -> Callable:
    """
    Populate the in-memory ledger with empty blocks (``first`` to ``last``) and return a helper to
    place transactions into them.
    """
    def build(first: int, last: int) -> Callable:
        for height in range(first, last + 1):
            ledger.add_block(Block(number=height, hash=make_hash(height, 0), timestamp=1_600_000_000 + height))

        def put(height: int, *entries) -> Block:
            transactions = [tx for tx, _ in entries]
            receipts = [r for _, r in entries if r is not None]
            block = ledger.add_block(
                Block(number=height, hash=make_hash(height, 0), timestamp=1_600_000_000 + height, transactions=transactions),
                receipts=receipts,
            )
            ledger.set_head(max(last, height))
            return block

        return put

    return build
