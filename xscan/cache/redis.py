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

import pickle
import redis

from .base import (
    Cache,
    TKey,
    TValue,
)


class Cache_Redis(Cache):
    """
    Wrapper around a redis instance, keeps token probe results across scanner runs

    Note: Currently uses ``pickle`` to convert any python value/object to bytes
    Note: All keys are namespaced with ``prefix`` so ``flush()`` never touches foreign keys
    """

    def __init__(self, host: str, port: int, password: Optional[str], db: int, prefix: str = "xscan:") -> None:
        self._prefix = prefix
        self._redis = redis.Redis(
            host=host,
            port=int(port),
            password=password,
            db=int(db),
        )

    def _key(self, name: TKey) -> bytes:
        if isinstance(name, str):
            name = name.encode("utf-8")
        return self._prefix.encode("utf-8") + name

    def set(self, name: TKey, value: TValue, ttl: Optional[int] = None) -> Any:
        self._redis.set(self._key(name), pickle.dumps(value, protocol=5), ex=ttl)

    def get(self, name: TKey) -> Any:
        raw = self._redis.get(self._key(name))
        if raw is None:
            return None
        return pickle.loads(raw)

    def remove(self, name: TKey) -> Any:
        self._redis.delete(self._key(name))

    def ping(self) -> Any:
        return self._redis.ping()

    def flush(self) -> Any:
        keys = list(self._redis.scan_iter(match=self._prefix + "*"))
        if keys:
            self._redis.delete(*keys)
