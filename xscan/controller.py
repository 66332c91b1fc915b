#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (C) 2022-2022 Riku Block
# All rights reserved.
#
# This file is part of XScan.

from typing import (
    Any,
    Callable,
    List,
    Optional,
    Sequence,
    Tuple,
)

import enum
import logging
import signal
import threading
from concurrent.futures import (
    ThreadPoolExecutor,
    wait,
)
from dataclasses import (
    dataclass,
    field,
)

import xscan.cache
from xscan.db import (
    ProgressStore,
    TransactionStore,
)
from xscan.exceptions import (
    ClassificationFailure,
    ConfigurationError,
    LedgerError,
)
from xscan.ledger import (
    LedgerReader,
    LedgerReader_Cached,
)
from xscan.scan import (
    AffiliationRule,
    ContractInteractionFilter,
    TokenCreationClassifier,
    format_token,
    format_token_transaction,
    format_transaction,
)
from xscan.types import Transaction
from xscan.util import parse_height

log = logging.getLogger(__name__)


class SignalContext(object):

    def __init__(self, signals: List[signal.Signals], handler: Callable):
        self._signals = set(signals)
        self._handler = handler
        self._cache = {}

    def __enter__(self):
        # register signal handlers
        for sig in self._signals:
            self._cache[sig] = signal.signal(sig, self._handler)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        # restore previous signal handlers
        for k, v in self._cache.items():
            signal.signal(k, v)
        self._cache = {}


class ControllerState(enum.Enum):
    UNKNOWN = 0
    INIT = enum.auto()
    RUNNING = enum.auto()
    TERMINATING = enum.auto()


@dataclass
class HeightResult(object):
    """
    Outcome of scanning a single height

    Attributes:
        height: block height
        found: False if the block does not exist (yet)
        transactions: number of transactions in the block
        matched: number of relevant transactions
        saved: number of newly stored transactions
        tokens: number of stored affiliated tokens
        failed: number of transactions that could not be checked or saved
    """
    height: int
    found: bool = True
    transactions: int = 0
    matched: int = 0
    saved: int = 0
    tokens: int = 0
    failed: int = 0


@dataclass
class ScanSummary(object):
    start: int
    end: int
    scanned: int = 0
    skipped: int = 0
    matched: int = 0
    saved: int = 0
    tokens: int = 0
    failed: List[int] = field(default_factory=list)
    interrupted: bool = False

    @property
    def total(self) -> int:
        return max(0, self.end - self.start + 1)

    def __repr__(self) -> str:
        return (
            f"ScanSummary(range={self.start}-{self.end} total={self.total} scanned={self.scanned} "
            f"skipped={self.skipped} failed={len(self.failed)} matched={self.matched} saved={self.saved} "
            f"tokens={self.tokens} interrupted={self.interrupted})"
        )


class Controller(object):
    """
    Scan orchestrator. Turns the append-only ledger into an idempotent, resumable ingestion loop.

    Program flow per height:
    0) ProgressStore: skip the height if it has already been processed
    1) LedgerReader: fetch the block with all transactions
    2) TokenCreationClassifier: detect and store affiliated token creations
    3) ContractInteractionFilter: narrow the block to transactions touching the target contract
    4) TransactionStore: store a normalized record of every relevant transaction (idempotent)
    5) ProgressStore: mark the height processed

    Concurrency:
    - heights are processed strictly sequentially on the calling thread
    - receipt lookups and saves of one height run on a small thread pool
    - step 5 is a barrier, it only runs after every job of steps 2-4 finished (success or logged failure)

    Failure policy:
    - a failed block fetch leaves the height unmarked (reported in the summary), the scan continues
    - a failed transaction/receipt/classification is logged and skipped, the height is still marked
    - re-running a range is the retry mechanism, processed heights are skipped cheaply
    """

    def __init__(
        self,
        ledger: LedgerReader,
        progress: ProgressStore,
        transactions: TransactionStore,
        target_address: Optional[str] = None,
        rule: Optional[AffiliationRule] = None,
        token_cache: Optional[xscan.cache.Cache] = None,
        token_cache_ttl: Optional[int] = None,
        num_workers: int = 4,
        default_blocks: int = 20,
        min_height: int = 1,
    ) -> None:
        """
        Create the scan orchestrator

        :param ledger: ledger reader
        :param progress: processed heights store
        :param transactions: transaction and token store
        :param target_address: contract address to filter for, None treats all transactions as relevant
        :param rule: token affiliation rule, None disables token creation detection
        :param token_cache: cache service for token probe results
        :param token_cache_ttl: expiry of cached token probe results in seconds
        :param num_workers: max number of concurrent jobs per height
        :param default_blocks: size of the default window below the chain head
        :param min_height: lowest height of the default window
        """
        assert num_workers > 0
        assert default_blocks >= 0
        assert min_height >= 0

        self._ledger = LedgerReader_Cached(ledger)
        self._progress = progress
        self._transactions = transactions

        self._num_workers = num_workers
        self._default_blocks = default_blocks
        self._min_height = min_height

        self._executor = ThreadPoolExecutor(max_workers=self._num_workers, thread_name_prefix="Worker")

        self._filter = ContractInteractionFilter(
            ledger=self._ledger,
            target_address=target_address,
            executor=self._executor,
        )

        self._classifier = None
        if rule is not None:
            self._classifier = TokenCreationClassifier(
                ledger=self._ledger,
                rule=rule,
                cache=token_cache,
                cache_ttl=token_cache_ttl,
            )

        self._state = ControllerState.INIT
        self._terminating = threading.Event()

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    @property
    def state(self) -> ControllerState:
        return self._state

    def start(self) -> None:
        log.info("Starting Controller")
        self._state = ControllerState.RUNNING

    def stop(self) -> None:
        """
        Terminate the controller, waits for outstanding jobs

        :return:
        """
        log.info("Terminating Controller")

        self._terminating.set()
        self._executor.shutdown(wait=True)
        self._state = ControllerState.TERMINATING

    def terminate(self) -> None:
        """
        Request the scan loop to stop after the current height

        :return:
        """
        self._terminating.set()

    def _handle_signal(self, signum, frame) -> None:
        log.critical(f"Received {signal.Signals(signum).name} ({signum}) '{signal.strsignal(signum)}'. Terminating!")
        self._terminating.set()

    def default_range(self) -> Optional[Tuple[int, int]]:
        """
        Most recent ``default_blocks`` heights below (and including) the chain head

        :return: range, None if the chain head is still below the minimum height
        """
        end = self._ledger.latest_height()
        start = max(self._min_height, end - self._default_blocks)
        if start > end:
            return None
        return start, end

    def resume_range(self) -> Optional[Tuple[int, int]]:
        """
        Range from the height after the last processed one up to the chain head

        Falls back to the default window if nothing has been processed yet.

        :return: range, None if there is nothing left to scan
        """
        last = self._progress.get_last_processed()
        if last == 0:
            log.warning("No processed blocks found, resuming with the default window")
            return self.default_range()

        end = self._ledger.latest_height()
        start = max(self._min_height, last + 1)
        if start > end:
            return None
        return start, end

    @staticmethod
    def validate_range(start: Any, end: Any) -> Tuple[int, int]:
        """
        Validate explicit range bounds

        :param start: first height
        :param end: last height (included)
        :return: integer bounds
        """
        try:
            start = parse_height(start)
            end = parse_height(end)
        except ValueError as e:
            raise ConfigurationError(f"Invalid block range: {e}") from e

        if start < 0:
            raise ConfigurationError(f"Invalid block range: negative start height {start}")
        if end < start:
            raise ConfigurationError(f"Invalid block range: end height {end} is lower than start height {start}")

        return start, end

    def _run_jobs(self, func: Callable[[Transaction], Any], items: Sequence[Transaction]) -> Tuple[List[Any], int]:
        """
        Run one job per transaction on the worker pool and wait for all of them.

        :param func: job function
        :param items: job arguments
        :return: tuple (results of successful jobs in submission order, number of failed jobs)
        """
        if len(items) == 0:
            return [], 0

        futures = [self._executor.submit(func, item) for item in items]
        wait(futures)

        results = []
        failed = 0
        for item, future in zip(items, futures):
            e = future.exception()
            if e is not None:
                log.error(f"Failed to process transaction '{item.hash}'", exc_info=e)
                failed += 1
            else:
                results.append(future.result())

        return results, failed

    def _process_token_creation(self, tx: Transaction, height: int, timestamp: Optional[int]) -> bool:
        try:
            detection = self._classifier.classify(tx)
        except ClassificationFailure as e:
            log.warning(str(e))
            return False

        if detection is None:
            return False

        if not detection.affiliated:
            log.info(f"Skipping unaffiliated token {detection.token.name} ({detection.token.symbol})")
            return False

        self._transactions.save_token(format_token(detection))
        self._transactions.save_transaction(format_token_transaction(detection, height, timestamp))
        return True

    def _save_transaction(self, tx: Transaction, height: int, timestamp: Optional[int]) -> bool:
        receipt = None
        try:
            receipt = self._ledger.get_receipt(tx.hash)
        except LedgerError as e:
            log.warning(f"Failed to get receipt for '{tx.hash}': {e}")

        record = format_transaction(tx, receipt, height, timestamp)
        return self._transactions.save_transaction(record)

    def _scan_height(self, height: int) -> HeightResult:
        """
        Scan a single height and mark it processed.

        Raises ``LedgerError`` if the block itself cannot be fetched, the height is not marked in that case.

        :param height: block height
        :return:
        """
        log.info(f"Scanning block {height} for transactions")

        result = HeightResult(height=height)

        try:
            block = self._ledger.get_block(height, include_transactions=True)

            if block is None:
                log.warning(f"Block {height} not found, marking as processed without transactions")
                result.found = False
                transactions = []
                timestamp = None
            else:
                transactions = block.transactions
                timestamp = block.timestamp

            result.transactions = len(transactions)

            # side classification, runs before the interaction records so a token creation keeps its tag
            if self._classifier is not None:
                candidates = [tx for tx in transactions if tx.hash and self._classifier.is_candidate(tx)]
                tokens, failed = self._run_jobs(lambda tx: self._process_token_creation(tx, height, timestamp), candidates)
                result.tokens = sum(tokens)
                result.failed += failed

            selected = self._filter.select(transactions)
            result.matched = len(selected.matched)
            result.failed += len(selected.failed)

            saved, failed = self._run_jobs(lambda tx: self._save_transaction(tx, height, timestamp), selected.matched)
            result.saved = sum(saved)
            result.failed += failed

            # barrier: all jobs of this height have been attempted
            self._progress.mark_processed(height)
        finally:
            self._ledger.reset()

        log.info(
            f"Block {height} processed. Found {result.matched} transactions, saved {result.saved} new "
            f"transactions ({result.tokens} tokens, {result.failed} failures)."
        )
        return result

    def scan_one(self, height: Any) -> int:
        """
        Scan a single height, regardless of whether it was processed before.

        Re-scanning is safe, stored records are deduplicated.

        :param height: block height
        :return: number of matched transactions
        """
        height, _ = self.validate_range(height, height)
        return self._scan_height(height).matched

    def scan_range(self, start_block: Any = None, end_block: Any = None) -> ScanSummary:
        """
        Scan all heights from ``start_block`` to ``end_block`` (included) in ascending order.

        Without bounds the default window below the chain head is scanned. Invalid bounds raise
        ``ConfigurationError`` before any work starts.

        Note: Runs on the calling thread
        Note: Processed heights are skipped without fetching the block

        :param start_block: first height
        :param end_block: last height (included in the scan)
        :return:
        """
        if start_block is None and end_block is None:
            default = self.default_range()
            if default is None:
                log.info("Nothing to scan, the chain head is below the minimum height")
                return ScanSummary(start=self._min_height, end=self._min_height - 1)
            start_block, end_block = default
        elif start_block is None or end_block is None:
            raise ConfigurationError("Invalid block range: both start and end height are required")

        start_block, end_block = self.validate_range(start_block, end_block)

        summary = ScanSummary(start=start_block, end=end_block)
        log.info(f"Starting scan ({start_block} to {end_block})")

        for height in range(start_block, end_block + 1):
            if self._terminating.is_set():
                log.warning(f"Scan interrupted before block {height}")
                summary.interrupted = True
                break

            if self._progress.is_processed(height):
                log.info(f"Block {height} already processed, skipping")
                summary.skipped += 1
                continue

            try:
                result = self._scan_height(height)
            except LedgerError as e:
                log.error(f"Failed to scan block {height}: {e}")
                summary.failed.append(height)
                continue
            except Exception:
                log.critical(f"Encountered unexpected error while scanning block {height}. Terminating!", exc_info=True)
                raise

            summary.scanned += 1
            summary.matched += result.matched
            summary.saved += result.saved
            summary.tokens += result.tokens

        log.info(f"Finished scan {summary}")
        return summary

    def run(self, start_block: Any = None, end_block: Any = None) -> ScanSummary:
        """
        Scan a range with POSIX signal handling (SIGHUP, SIGINT, SIGTERM finish the current height, then stop).

        For more details see the ``scan_range()`` documentation.

        Note: Has to be called from the main thread

        :param start_block: first height
        :param end_block: last height (included in the scan)
        :return:
        """
        assert self._state == ControllerState.RUNNING

        with SignalContext([signal.SIGHUP, signal.SIGINT, signal.SIGTERM], self._handle_signal):
            return self.scan_range(start_block, end_block)
