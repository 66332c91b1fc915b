#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (C) 2022-2022 Riku Block
# All rights reserved.
#
# This file is part of XScan.

from typing import (
    Iterable,
    Optional,
)

import logging

import xscan.cache
from xscan.exceptions import (
    ClassificationFailure,
    ContractCallError,
)
from xscan.ledger import LedgerReader
from xscan.types import (
    TokenDetection,
    TokenInfo,
    Transaction,
)
from .affiliation import AffiliationRule

log = logging.getLogger(__name__)

# Creation bytecode prefixes of common token templates (solidity free memory pointer setup)
TOKEN_BYTECODE_PREFIXES = (
    "0x60806040",
    "0x6060604052",
)


class TokenCreationClassifier(object):
    """
    Detect contract creation transactions that deploy a token of the tracked project.

    Runs a single pass per transaction:
    1) candidate check: no ``to`` address and the input starts with a known bytecode prefix
    2) receipt resolution: the receipt has to name the created ``contractAddress``
    3) capability probe: the contract has code and answers name(), symbol() and decimals()
    4) affiliation rule: decided by a pluggable ``AffiliationRule``

    Steps 1-3 reject by returning None. Unexpected errors in steps 2-4 raise ``ClassificationFailure``,
    which only affects the transaction at hand.
    """

    def __init__(
        self,
        ledger: LedgerReader,
        rule: AffiliationRule,
        cache: Optional[xscan.cache.Cache] = None,
        prefixes: Iterable[str] = TOKEN_BYTECODE_PREFIXES,
        cache_ttl: Optional[int] = None,
    ) -> None:
        """
        Create classifier

        :param ledger: ledger reader (receipts and contract calls)
        :param rule: affiliation rule
        :param cache: cache service for probe results
        :param prefixes: creation bytecode prefixes of token candidates
        :param cache_ttl: expiry of cached probe results in seconds
        """
        self._ledger = ledger
        self._rule = rule
        self._cache = cache if cache is not None else xscan.cache.Cache_Dummy()
        self._prefixes = tuple(p.lower() for p in prefixes)
        self._cache_ttl = cache_ttl

    @property
    def rule(self) -> AffiliationRule:
        return self._rule

    def is_candidate(self, tx: Transaction) -> bool:
        if not tx.is_creation or not tx.input:
            return False
        data = tx.input.lower()
        return any(data.startswith(p) for p in self._prefixes)

    def _fetch_token_info(self, address: str) -> Optional[TokenInfo]:
        if not self._ledger.has_code(address):
            log.debug(f"No code at '{address}'")
            return None

        try:
            name = self._ledger.call(address, "name")
            symbol = self._ledger.call(address, "symbol")
            decimals = self._ledger.call(address, "decimals")
        except ContractCallError as e:
            log.debug(f"Contract '{address}' is not a token: {e}")
            return None

        if not isinstance(name, str) or not isinstance(symbol, str) or not isinstance(decimals, int):
            log.warning(f"Encountered uncommon token contract '{address}' ({name!r}, {symbol!r}, {decimals!r})")
            return None

        return TokenInfo(address=address, name=name, symbol=symbol, decimals=decimals)

    def probe(self, address: str) -> Optional[TokenInfo]:
        """
        Query the minimal token capability interface of a contract

        Note: positive results are cached, token metadata is immutable

        :param address: contract address
        :return: token info, None if the contract is not a token
        """
        key = f"_token_{address.lower()}"
        return self._cache.get_or_set(key, lambda: self._fetch_token_info(address), ttl=self._cache_ttl)

    def classify(self, tx: Transaction) -> Optional[TokenDetection]:
        """
        Classify a single transaction

        :param tx: transaction
        :return: detection (affiliated or not), None if the transaction did not deploy a token
        """
        if not self.is_candidate(tx):
            return None

        try:
            receipt = self._ledger.get_receipt(tx.hash)
            if receipt is None or not receipt.contract_address:
                log.debug(f"Creation transaction '{tx.hash}' has no contract address")
                return None

            token = self.probe(receipt.contract_address)
            if token is None:
                return None

            affiliated = bool(self._rule.is_affiliated(token.name, token.symbol, tx.from_))
        except Exception as e:
            raise ClassificationFailure(f"Failed to classify transaction '{tx.hash}': {e}") from e

        log.info(f"Token creation detected at '{token.address}': {token.name} ({token.symbol}) affiliated={affiliated}")

        return TokenDetection(
            token=token,
            transaction=tx,
            receipt=receipt,
            affiliated=affiliated,
        )
