#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (C) 2022-2022 Riku Block
# All rights reserved.
#
# This file is part of XScan.


class XScanError(Exception):
    pass


class LedgerError(XScanError):
    """
    Base class for errors raised by a ledger reader
    """
    pass


class UpstreamUnavailable(LedgerError):
    """
    The ledger source is unreachable or failing at the connection level
    """
    pass


class TransientFetchFailure(LedgerError):
    """
    A single block, transaction or receipt lookup failed
    """
    pass


class ContractCallError(TransientFetchFailure):
    """
    A read-only contract call reverted or returned output that could not be decoded
    """
    pass


class ClassificationFailure(XScanError):
    pass


class ConfigurationError(XScanError):
    pass
