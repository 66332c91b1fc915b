#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (C) 2022-2022 Riku Block
# All rights reserved.
#
# This file is part of XScan.

from typing import (
    List,
    Optional,
    Sequence,
    Tuple,
)

import logging
from concurrent.futures import Executor
from dataclasses import (
    dataclass,
    field,
)

from xscan.exceptions import LedgerError
from xscan.ledger import LedgerReader
from xscan.types import Transaction
from xscan.util import normalize_address

log = logging.getLogger(__name__)


@dataclass
class FilterResult(object):
    """
    Attributes:
        matched: relevant transactions (subsequence of the input, original order)
        failed: hashes of transactions excluded because their receipt could not be fetched
    """
    matched: List[Transaction] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


class ContractInteractionFilter(object):
    """
    Select the transactions of a block that interact with a target contract.

    A transaction is relevant if
    a) its ``to`` or ``from`` address equals the target (direct interaction), or
    b) any log in its receipt was emitted by the target (indirect interaction, e.g. the transaction
       called another contract which in turn called the target).

    The direct check needs no I/O and is always tried first; receipts are only fetched for
    transactions that fail it. Without a target address every transaction is relevant.
    """

    def __init__(self, ledger: LedgerReader, target_address: Optional[str], executor: Optional[Executor] = None) -> None:
        """
        Create filter

        :param ledger: ledger reader used for receipt lookups
        :param target_address: contract address, None disables filtering
        :param executor: optional executor to run receipt lookups concurrently
        """
        self._ledger = ledger
        self._target = normalize_address(target_address)
        self._executor = executor

    @property
    def target_address(self) -> Optional[str]:
        return self._target

    def is_direct(self, tx: Transaction) -> bool:
        return self._target is not None and self._target in (normalize_address(tx.to), normalize_address(tx.from_))

    def _check_logs(self, tx: Transaction) -> Tuple[bool, bool]:
        """
        Check the receipt logs of a transaction for the target address

        :param tx: transaction
        :return: tuple (matched, failed)
        """
        try:
            receipt = self._ledger.get_receipt(tx.hash)
        except LedgerError as e:
            log.warning(f"Failed to check logs of transaction '{tx.hash}': {e}")
            return False, True

        if receipt is None:
            return False, False

        return any(normalize_address(entry.address) == self._target for entry in receipt.logs), False

    def select(self, transactions: Sequence[Transaction]) -> FilterResult:
        """
        Filter transactions and report the ones that could not be checked

        :param transactions: transactions of a block
        :return:
        """
        result = FilterResult()
        candidates = [tx for tx in transactions if tx is not None and tx.hash]

        if self._target is None:
            result.matched = candidates
            return result

        def check(tx: Transaction) -> Tuple[bool, bool]:
            if self.is_direct(tx):
                return True, False
            return self._check_logs(tx)

        if self._executor is not None and len(candidates) > 1:
            # Note: map() yields results in submission order
            outcomes = list(self._executor.map(check, candidates))
        else:
            outcomes = [check(tx) for tx in candidates]

        for tx, (matched, failed) in zip(candidates, outcomes):
            if matched:
                result.matched.append(tx)
            elif failed:
                result.failed.append(tx.hash)

        return result

    def filter(self, transactions: Sequence[Transaction]) -> List[Transaction]:
        """
        Relevant transactions in their original relative order

        :param transactions: transactions of a block
        :return:
        """
        return self.select(transactions).matched
