#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (C) 2022-2022 Riku Block
# All rights reserved.
#
# This file is part of XScan.

from typing import (
    Any,
    Optional,
)

import functools
import logging
import time

log = logging.getLogger(__name__)


def timeit(func: callable) -> callable:
    """
    Decorator for measuring a function's running time

    :param func: function
    :return:
    """
    @functools.wraps(func)
    def measure_time(*args, **kwargs):
        start_time = time.time()
        result = func(*args, **kwargs)
        elapsed = time.time() - start_time
        log.info(f"Processing time of '{func.__qualname__}()': {elapsed:.4f} seconds.")
        return result

    return measure_time


def normalize_address(address: Optional[str]) -> Optional[str]:
    """
    Canonical, case-insensitive form of an address used for comparisons.

    Example:
    '0xE54Ca86531e17Ef3616d22Ca28b0D458b6C89106' -> '0xe54ca86531e17ef3616d22ca28b0d458b6c89106'

    :param address: hex address (checksummed or not)
    :return: lower case address, None for an empty value
    """
    if not address:
        return None
    return address.strip().lower()


def parse_height(value: Any) -> int:
    """
    Strictly convert a block height bound to an integer.

    Accepts integers and decimal strings. Booleans, floats with a fraction,
    and other strings are rejected.

    :param value: raw bound
    :return:
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid block height {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise ValueError(f"Invalid block height {value!r}")
