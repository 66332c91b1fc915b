#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (C) 2022-2022 Riku Block
# All rights reserved.
#
# This file is part of XScan.

from .misc import (
    build_url,
    url_from_config,
)
from .pgsql import FusionSQL
from .store import (
    ProgressStore,
    TransactionStore,
)
