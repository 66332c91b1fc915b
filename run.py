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

import argparse
import logging
import sys

import xscan.cache
import xscan.controller
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
    UpstreamUnavailable,
)
from xscan.util import timeit

log = logging.getLogger("main")

MIN_PYTHON = (3, 8)
if sys.version_info < MIN_PYTHON:
    sys.exit("Python {}.{} or later is required!".format(*MIN_PYTHON))


# Basic XScan program flow
# 0) Controller: resolve the block range, manage the worker pool
# 1) LedgerReader: fetch each block with its transactions
# 2) TokenCreationClassifier: detect affiliated token deployments
# 3) ContractInteractionFilter: select transactions touching the target contract
# 4) TransactionStore: idempotently store normalized transaction records
# 5) ProgressStore: mark the height processed (resumable, re-runs skip it)
#
# Heights are scanned sequentially in the main thread, per-transaction work of one height
# runs on a small thread pool and is joined before the height is marked.


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Incremental block scanner for transactions of a target contract and affiliated token creations.",
    )
    parser.add_argument("start", nargs="?", default=None, help="first block height")
    parser.add_argument("end", nargs="?", default=None, help="last block height (included)")
    parser.add_argument(
        "--resume",
        action="store_true",
        help="continue from the last processed height up to the chain head",
    )
    return parser.parse_args(argv)


@timeit
def main(argv: Optional[List[str]] = None) -> int:
    """
    Scan a block range, by default the most recent blocks below the chain head.

    Usage:
        run.py                  # default window below the chain head
        run.py 1000 2000        # explicit range (both bounds included)
        run.py --resume         # last processed height + 1 up to the chain head

    :return:
    """
    logging.basicConfig(level=C["LOG_LEVEL"], format=C["LOG_FORMAT"], datefmt=C["LOG_DATE_FORMAT"])

    args = parse_args(argv)

    # validate everything before a connection is opened
    try:
        check_config(C)

        if (args.start is None) != (args.end is None):
            raise ConfigurationError("Invalid block range: both start and end height are required")
        if args.resume and args.start is not None:
            raise ConfigurationError("Explicit block range and --resume are mutually exclusive")
        if args.start is not None:
            xscan.controller.Controller.validate_range(args.start, args.end)

        cache = xscan.cache.build_cache(C)
    except ConfigurationError as e:
        log.error(e)
        return 1

    w3 = xscan.provider.build_web3(endpoint_uri=C["API_URL"], poa=C["API_POA"])

    rule = xscan.scan.MarkerAffiliationRule(
        markers=C["SCAN_TOKEN_MARKERS"],
        known_deployer=C["SCAN_KNOWN_DEPLOYER"],
    )

    num_workers = int(C["XS_NUM_WORKERS"])

    try:
        with xscan.db.FusionSQL(conn=xscan.db.url_from_config(C), verbose=C["DB_DEBUG"]) as db, \
                xscan.ledger.LedgerReader_Rpc(w3=w3, num_workers=num_workers) as ledger:

            missing = db.missing_tables()
            if missing:
                log.error(f"Database is not migrated, missing tables: {', '.join(missing)} (run 'alembic upgrade head')")
                return 1

            controller = xscan.controller.Controller(
                ledger=ledger,
                progress=xscan.db.ProgressStore(db),
                transactions=xscan.db.TransactionStore(db),
                target_address=C["SCAN_TARGET_ADDRESS"],
                rule=rule,
                token_cache=cache,
                token_cache_ttl=int(C["CACHE_TTL"]),
                num_workers=num_workers,
                default_blocks=int(C["SCAN_DEFAULT_BLOCKS"]),
                min_height=int(C["SCAN_MIN_HEIGHT"]),
            )

            with controller as c:
                start_block, end_block = args.start, args.end

                if start_block is None:
                    window = c.resume_range() if args.resume else c.default_range()
                    if window is None:
                        log.info("Nothing to scan, already up to date or the chain head is below the minimum height")
                        return 0
                    start_block, end_block = window

                summary = c.run(start_block=start_block, end_block=end_block)

    except UpstreamUnavailable as e:
        log.error(f"Ledger unavailable: {e}")
        return 1
    except ConfigurationError as e:
        log.error(e)
        return 1

    log.info(f"Scan completed: {summary}")
    return 0 if not summary.failed else 2


if __name__ == "__main__":
    sys.exit(main())
