#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (C) 2022-2022 Riku Block
# All rights reserved.
#
# This file is part of XScan.

from typing import (
    Iterator,
    List,
)

import pytest

from unittest.mock import (
    MagicMock,
    patch,
)

import run
import xscan.db
from xscan.exceptions import ConfigurationError

from memory_ledger import LedgerReader_Memory


@pytest.mark.parametrize("argv", [
    ["100"],
    ["abc", "200"],
    ["200", "100"],
    ["-5", "10"],
    ["--resume", "1", "2"],
])
def test_run_invalid_arguments(argv: List[str]) -> None:
    """
    Invalid input exits with status 1 before any connection is opened
    """
    with patch("xscan.db.FusionSQL") as db, patch("xscan.provider.build_web3") as w3:
        assert run.main(argv) == 1

    db.assert_not_called()
    w3.assert_not_called()


def test_parse_args() -> None:
    args = run.parse_args([])
    assert args.start is None
    assert args.end is None
    assert not args.resume

    args = run.parse_args(["10", "20"])
    assert (args.start, args.end) == ("10", "20")

    assert run.parse_args(["--resume"]).resume


@pytest.fixture(scope="function")
def services(dbm: xscan.db.FusionSQL) -> Iterator[LedgerReader_Memory]:
    """
    Migrated test database and an in-memory ledger in place of the RPC connections
    """
    ledger = LedgerReader_Memory(head=0)

    with patch("xscan.db.url_from_config", return_value=str(dbm.engine.url)), \
            patch("xscan.ledger.LedgerReader_Rpc") as rpc, \
            patch("xscan.provider.build_web3"):
        rpc.return_value.__enter__.return_value = ledger
        yield ledger


@pytest.mark.parametrize("argv", [
    [],
    ["--resume"],
])
def test_run_below_min_height(services: LedgerReader_Memory, argv: List[str]) -> None:
    """
    A chain head below the minimum height leaves nothing to scan
    """
    assert run.main(argv) == 0
    assert "get_block" not in services.requests


def test_run_configuration_error(services: LedgerReader_Memory) -> None:
    with patch("xscan.controller.Controller.run", MagicMock(side_effect=ConfigurationError("Invalid block range"))):
        assert run.main(["1", "2"]) == 1
