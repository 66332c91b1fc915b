#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (C) 2022-2022 Riku Block
# All rights reserved.
#
# This file is part of XScan.

import pytest

import xscan.cache
from xscan.exceptions import ClassificationFailure
from xscan.scan import (
    MarkerAffiliationRule,
    TokenCreationClassifier,
)

from conftest import (
    ALICE,
    BOB,
    make_receipt,
    make_tx,
)
from memory_ledger import LedgerReader_Memory

TOKEN = "0x5e2e5fbc0fc3dc6ff8e1e8b8a7f7e6b43ad8f4c1"
BYTECODE = "0x608060405234801561001057600080fd5b50"


@pytest.fixture(scope="function")
def classifier(ledger: LedgerReader_Memory, rule: MarkerAffiliationRule) -> TokenCreationClassifier:
    return TokenCreationClassifier(ledger=ledger, rule=rule, cache=xscan.cache.Cache_Memory())


def deploy(ledger: LedgerReader_Memory, from_: str = ALICE, **functions):
    tx = make_tx(500, 0, from_=from_, to=None, input=BYTECODE)
    ledger.add_receipt(make_receipt(tx, contract_address=TOKEN))
    ledger.add_contract(TOKEN, **functions)
    return tx


def test_classifier_candidate(classifier: TokenCreationClassifier) -> None:
    assert classifier.is_candidate(make_tx(500, 0, to=None, input=BYTECODE))
    assert classifier.is_candidate(make_tx(500, 0, to=None, input="0x6060604052600436"))
    assert classifier.is_candidate(make_tx(500, 0, to=None, input="0X60806040ABCD"))

    # plain transfers and unknown bytecode
    assert not classifier.is_candidate(make_tx(500, 0, to=BOB, input=BYTECODE))
    assert not classifier.is_candidate(make_tx(500, 0, to=None, input="0x"))
    assert not classifier.is_candidate(make_tx(500, 0, to=None, input="0x3d602d80600a3d3981f3"))


def test_classifier_affiliated(ledger: LedgerReader_Memory, classifier: TokenCreationClassifier) -> None:
    tx = deploy(ledger, name="SonicX Token", symbol="SNX", decimals=18)

    detection = classifier.classify(tx)

    assert detection is not None
    assert detection.affiliated
    assert detection.token.address == TOKEN
    assert detection.token.name == "SonicX Token"
    assert detection.token.symbol == "SNX"
    assert detection.token.decimals == 18
    assert detection.transaction == tx
    assert detection.receipt.contract_address == TOKEN


def test_classifier_unaffiliated(ledger: LedgerReader_Memory, classifier: TokenCreationClassifier) -> None:
    tx = deploy(ledger, name="Pepe", symbol="PEPE", decimals=18)

    detection = classifier.classify(tx)

    assert detection is not None
    assert not detection.affiliated


def test_classifier_known_deployer(ledger: LedgerReader_Memory) -> None:
    rule = MarkerAffiliationRule(markers=["sonicx"], known_deployer=ALICE.upper().replace("0X", "0x"))
    classifier = TokenCreationClassifier(ledger=ledger, rule=rule)

    tx = deploy(ledger, name="Pepe", symbol="PEPE", decimals=18)
    assert classifier.classify(tx).affiliated

    tx = deploy(ledger, from_=BOB, name="Pepe", symbol="PEPE", decimals=18)
    assert not classifier.classify(tx).affiliated


def test_classifier_not_a_token(ledger: LedgerReader_Memory, classifier: TokenCreationClassifier) -> None:
    # reverts on name()
    tx = deploy(ledger)
    assert classifier.classify(tx) is None

    # decimals() is missing
    tx = deploy(ledger, name="SonicX Token", symbol="SNX")
    assert classifier.classify(tx) is None

    # unexpected return types
    tx = deploy(ledger, name="SonicX Token", symbol="SNX", decimals="18")
    assert classifier.classify(tx) is None


def test_classifier_no_code(ledger: LedgerReader_Memory, classifier: TokenCreationClassifier) -> None:
    tx = make_tx(500, 0, to=None, input=BYTECODE)
    ledger.add_receipt(make_receipt(tx, contract_address=TOKEN))
    ledger.add_contract(TOKEN, code=b"", name="SonicX Token", symbol="SNX", decimals=18)

    assert classifier.classify(tx) is None
    assert ledger.requests.get("call", 0) == 0


def test_classifier_no_receipt(ledger: LedgerReader_Memory, classifier: TokenCreationClassifier) -> None:
    tx = make_tx(500, 0, to=None, input=BYTECODE)
    assert classifier.classify(tx) is None

    # receipt without a created contract
    ledger.add_receipt(make_receipt(tx))
    assert classifier.classify(tx) is None


def test_classifier_probe_cached(ledger: LedgerReader_Memory, classifier: TokenCreationClassifier) -> None:
    tx = deploy(ledger, name="SonicX Token", symbol="SNX", decimals=18)

    assert classifier.classify(tx).affiliated
    assert classifier.classify(tx).affiliated

    # name, symbol, decimals only once
    assert ledger.requests["call"] == 3
    assert ledger.requests["has_code"] == 1


def test_classifier_failure(ledger: LedgerReader_Memory, classifier: TokenCreationClassifier) -> None:
    tx = deploy(ledger, name="SonicX Token", symbol="SNX", decimals=18)
    ledger.fail_receipt(tx.hash)

    with pytest.raises(ClassificationFailure):
        classifier.classify(tx)


def test_classifier_skips_non_candidates(ledger: LedgerReader_Memory, classifier: TokenCreationClassifier) -> None:
    assert classifier.classify(make_tx(500, 0)) is None
    assert ledger.requests == {}
