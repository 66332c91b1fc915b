#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (C) 2022-2022 Riku Block
# All rights reserved.
#
# This file is part of XScan.

from typing import (
    Any,
    Dict,
    Optional,
    Tuple,
)

import threading
import time

from .base import (
    Cache,
    TKey,
    TValue,
)


class Cache_Memory(Cache):
    """
    In-memory cache service

    Safe to share between the worker threads of a single scan.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._cache: Dict[TKey, Tuple[TValue, Optional[float]]] = {}

    def set(self, name: TKey, value: TValue, ttl: Optional[int] = None) -> Any:
        expires = time.monotonic() + ttl if ttl is not None else None
        with self._lock:
            self._cache[name] = (value, expires)

    def get(self, name: TKey) -> Any:
        with self._lock:
            try:
                value, expires = self._cache[name]
            except KeyError:
                return None

            if expires is not None and expires <= time.monotonic():
                del self._cache[name]
                return None

            return value

    def remove(self, name: TKey) -> Any:
        with self._lock:
            self._cache.pop(name, None)

    def ping(self) -> Any:
        return True

    def flush(self) -> Any:
        with self._lock:
            self._cache = {}

    def __len__(self) -> int:
        return len(self._cache)
