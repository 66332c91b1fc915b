#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (C) 2022-2022 Riku Block
# All rights reserved.
#
# This file is part of XScan.

from typing import (
    Any,
    Callable,
    Optional,
    Union,
)

import abc
import logging

log = logging.getLogger(__name__)

TKey = Union[bytes, str]
TValue = Any


class Cache(abc.ABC):
    """
    Thin abstraction over the key/value service used to memoize ledger lookups
    (token capability probes, receipts of the height being scanned).

    Note: ``None`` is never stored, a missing key and a ``None`` value are indistinguishable.
    """

    def __contains__(self, key: TKey) -> bool:
        return self.get(key) is not None

    def get_or_set(self, name: TKey, factory: Callable[[], TValue], ttl: Optional[int] = None) -> Any:
        """
        Return the cached value for ``name``, computing and storing it on a miss.

        Exceptions raised by ``factory`` propagate and nothing is stored.

        :param name: key
        :param factory: callable producing the value
        :param ttl: expiry in seconds for a newly stored value
        :return:
        """
        value = self.get(name)
        if value is None:
            value = factory()
            if value is not None:
                self.set(name, value, ttl=ttl)
        return value

    @abc.abstractmethod
    def set(self, name: TKey, value: TValue, ttl: Optional[int] = None) -> Any:
        """
        Set the value at key ``name`` to ``value``

        :param name:
        :param value:
        :param ttl: sets an expire flag on key ``name`` for ``ttl`` seconds
        :return:
        """
        raise NotImplementedError

    @abc.abstractmethod
    def get(self, name: TKey) -> Any:
        """
        Return the value at key ``name``, or None if the key doesn't exist

        :param name: key
        :return:
        """
        raise NotImplementedError

    @abc.abstractmethod
    def remove(self, name: TKey) -> Any:
        raise NotImplementedError

    @abc.abstractmethod
    def ping(self) -> Any:
        """
        Check the cache service is reachable, raises the backend error otherwise

        :return:
        """
        raise NotImplementedError

    @abc.abstractmethod
    def flush(self) -> Any:
        """
        Drop every entry owned by this cache (the receipts of a height, or all probe results)

        :return:
        """
        raise NotImplementedError


class Cache_Dummy(Cache):
    """
    Cache service that never stores anything
    """

    def __init__(self, *args, **kwargs) -> None:
        pass

    def set(self, name: TKey, value: TValue, ttl: Optional[int] = None) -> Any:
        return True

    def get(self, name: TKey) -> Any:
        return None

    def remove(self, name: TKey) -> Any:
        return True

    def ping(self) -> Any:
        return True

    def flush(self) -> Any:
        return True
