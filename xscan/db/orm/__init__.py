#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (C) 2022-2022 Riku Block
# All rights reserved.
#
# This file is part of XScan.

from .base import (
    Base,
    BaseModel,
    BaseModelCreated,
    utcnow,
)
from .ledger import (
    SENTINEL_CONTRACT_CREATION,
    SENTINEL_UNKNOWN,
    Token,
    Transaction,
    TransactionType,
)
from .state import ProcessedBlock
