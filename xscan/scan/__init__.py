#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (C) 2022-2022 Riku Block
# All rights reserved.
#
# This file is part of XScan.

from .affiliation import (
    AffiliationRule,
    MarkerAffiliationRule,
)
from .classifier import (
    TOKEN_BYTECODE_PREFIXES,
    TokenCreationClassifier,
)
from .filter import (
    ContractInteractionFilter,
    FilterResult,
)
from .record import (
    format_token,
    format_token_transaction,
    format_transaction,
)
