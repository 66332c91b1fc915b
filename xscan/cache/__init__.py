#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (C) 2022-2022 Riku Block
# All rights reserved.
#
# This file is part of XScan.

from .base import (
    Cache,
    Cache_Dummy,
)
from .memory import Cache_Memory
from .redis import Cache_Redis
from xscan.exceptions import ConfigurationError


def build_cache(config: dict) -> Cache:
    """
    Create the cache service selected by ``CACHE_BACKEND``

    :param config: settings dictionary
    :return:
    """
    backend = config["CACHE_BACKEND"]
    if backend == "memory":
        return Cache_Memory()
    elif backend == "redis":
        return Cache_Redis(
            host=config["REDIS_HOST"],
            port=config["REDIS_PORT"],
            password=config["REDIS_PASSWORD"],
            db=config["REDIS_DATABASE"],
        )
    elif backend == "none":
        return Cache_Dummy()
    else:
        raise ConfigurationError(f"Unknown cache backend '{backend}'")
