#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (C) 2022-2022 Riku Block
# All rights reserved.
#
# This file is part of XScan.

from .base import LedgerReader
from .cached import LedgerReader_Cached
from .rpc import LedgerReader_Rpc
