#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (C) 2022-2022 Riku Block
# All rights reserved.
#
# This file is part of XScan.

import logging
import sys

import redis
import sqlalchemy.exc

import xscan.cache
import xscan.db
import xscan.ledger
import xscan.provider
import xscan.scan

from xscan.config import (
    CONFIG as C,
    check_config,
)
from xscan.exceptions import (
    ConfigurationError,
    LedgerError,
)
from xscan.util import timeit

log = logging.getLogger("diagnose")

MIN_PYTHON = (3, 8)
if sys.version_info < MIN_PYTHON:
    sys.exit("Python {}.{} or later is required!".format(*MIN_PYTHON))

# number of recent blocks searched for activity
RECENT_BLOCKS = 10
# number of transactions per block shown in detail
SAMPLE_SIZE = 2


def check_ledger(ledger: xscan.ledger.LedgerReader) -> None:
    latest = ledger.latest_height()
    log.info(f"Latest block number: {latest}")

    block = ledger.get_block(latest, include_transactions=True)
    if block is None:
        log.warning(f"Block {latest} not available yet")
        return

    log.info(f"Block {latest}: hash={block.hash} timestamp={block.timestamp} transactions={len(block.transactions)}")

    for tx in block.transactions[:SAMPLE_SIZE]:
        log.info(
            f"Transaction '{tx.hash}': from={tx.from_} to={tx.to or 'Contract Creation'} "
            f"value={tx.value} gasPrice={tx.gas_price} gasLimit={tx.gas_limit}"
        )
        try:
            receipt = ledger.get_receipt(tx.hash)
        except LedgerError as e:
            log.warning(f"Failed to fetch receipt of '{tx.hash}': {e}")
            continue

        if receipt is not None:
            log.info(f"Receipt '{tx.hash}': status={receipt.status.value} gasUsed={receipt.gas_used} logs={len(receipt.logs)}")


def check_target(ledger: xscan.ledger.LedgerReader, target_address: str) -> None:
    if not ledger.has_code(target_address):
        log.warning(f"No code found at '{target_address}'. It might be an EOA or not exist.")
        return

    log.info(f"Contract '{target_address}' exists and has code deployed")

    filter_ = xscan.scan.ContractInteractionFilter(ledger=ledger, target_address=target_address)

    latest = ledger.latest_height()
    for height in range(latest, max(-1, latest - RECENT_BLOCKS), -1):
        block = ledger.get_block(height, include_transactions=True)
        if block is None:
            continue

        for tx in block.transactions:
            if filter_.is_direct(tx):
                log.info(f"Found transaction involving the contract in block {height}: '{tx.hash}'")
                return

    log.info(f"No direct transactions involving the contract found in the last {RECENT_BLOCKS} blocks")


@timeit
def main() -> int:
    """
    Simple diagnostics script to ensure the environment is working.

    :return:
    """
    logging.basicConfig(level=C["LOG_LEVEL"], format=C["LOG_FORMAT"], datefmt=C["LOG_DATE_FORMAT"])

    try:
        check_config(C)
        cache = xscan.cache.build_cache(C)
    except ConfigurationError as e:
        log.error(e)
        return 1

    # check rpc node
    log.info(f"Connecting to RPC endpoint: {C['API_URL']}")
    w3 = xscan.provider.build_web3(endpoint_uri=C["API_URL"], poa=C["API_POA"])

    try:
        with xscan.ledger.LedgerReader_Rpc(w3=w3, num_workers=1) as ledger:
            check_ledger(ledger)
            if C["SCAN_TARGET_ADDRESS"]:
                check_target(ledger, C["SCAN_TARGET_ADDRESS"])
    except LedgerError as e:
        log.error(f"Ledger check failed: {e}")
        return 1

    # check database, all tables have to be migrated
    try:
        with xscan.db.FusionSQL(conn=xscan.db.url_from_config(C), verbose=C["DB_DEBUG"]) as db:
            missing = db.missing_tables()
            if missing:
                log.error(f"Database is not migrated, missing tables: {', '.join(missing)}")
                return 1

            progress = xscan.db.ProgressStore(db)
            log.info(f"Database ready, {progress.count()} blocks processed (last {progress.get_last_processed()})")
    except sqlalchemy.exc.OperationalError as e:
        log.error(f"Database check failed: {e}")
        return 1

    # check cache
    try:
        cache.ping()
    except redis.exceptions.RedisError as e:
        log.error(f"Cache check failed: {e}")
        return 1
    log.info(f"Cache ready ({type(cache).__name__})")

    return 0


if __name__ == "__main__":
    sys.exit(main())
