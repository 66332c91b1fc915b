#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (C) 2022-2022 Riku Block
# All rights reserved.
#
# This file is part of XScan.

import os
import logging

from eth_utils import is_address

from xscan.exceptions import ConfigurationError


def _split(value: str) -> tuple:
    return tuple(v.strip() for v in value.split(",") if v.strip())


DEFAULT = {
    # Logging settings
    "LOG_LEVEL": logging.INFO,
    "LOG_FORMAT": "%(asctime)s.%(msecs)04d %(levelname)-5s [%(threadName)-10s %(process)5d] %(name)s: %(message)s",
    "LOG_DATE_FORMAT": "%H:%M:%S",

    # Database settings
    # Note: a full ``DB_URL`` takes precedence over the individual parts
    "DB_URL": os.getenv("DB_URL"),
    "DB_DRIVER": "postgresql",
    "DB_HOST": os.getenv("DB_HOST", "localhost"),
    "DB_PORT": os.getenv("DB_PORT", 5432),
    "DB_USERNAME": os.getenv("DB_USERNAME", "root"),
    "DB_PASSWORD": os.getenv("DB_PASSWORD", "password"),
    "DB_DATABASE": os.getenv("DB_DATABASE", "sonicx_scanner"),
    "DB_SCHEMA": os.getenv("DB_SCHEMA"),

    "DB_DEBUG": False,

    # Cache settings ("memory" or "redis")
    "CACHE_BACKEND": os.getenv("CACHE_BACKEND", "memory"),
    "CACHE_TTL": os.getenv("CACHE_TTL", 86400),
    "REDIS_HOST": os.getenv("REDIS_HOST", "localhost"),
    "REDIS_PORT": os.getenv("REDIS_PORT", 6379),
    "REDIS_PASSWORD": os.getenv("REDIS_PASSWORD", "password"),
    "REDIS_DATABASE": os.getenv("REDIS_DATABASE", 0),

    # web3 provider RPC url
    "API_URL": os.getenv("API_URL", "https://rpc.soniclabs.com/"),
    "API_POA": os.getenv("API_POA", "0") == "1",

    # Controller settings
    "XS_NUM_WORKERS": os.getenv("XS_NUM_WORKERS", 4),

    # Scan settings
    "SCAN_TARGET_ADDRESS": os.getenv("SCAN_TARGET_ADDRESS"),
    "SCAN_TOKEN_MARKERS": _split(os.getenv("SCAN_TOKEN_MARKERS", "sonicx,sonic,sonix")),
    # the original deployment treated the tracked contract itself as the known token creator
    "SCAN_KNOWN_DEPLOYER": os.getenv("SCAN_KNOWN_DEPLOYER", os.getenv("SCAN_TARGET_ADDRESS")),
    "SCAN_DEFAULT_BLOCKS": os.getenv("SCAN_DEFAULT_BLOCKS", 20),
    "SCAN_MIN_HEIGHT": os.getenv("SCAN_MIN_HEIGHT", 1),
}

CONFIG = dict(DEFAULT)


def check_config(config: dict) -> None:
    """
    Validate the settings before any resource is opened

    :param config: settings dictionary
    :return:
    """
    if not config.get("API_URL"):
        raise ConfigurationError("Missing ledger RPC url (API_URL)")

    for key in ("SCAN_TARGET_ADDRESS", "SCAN_KNOWN_DEPLOYER"):
        value = config.get(key)
        if value and not is_address(value):
            raise ConfigurationError(f"Invalid address '{value}' ({key})")

    for key, minimum in (("XS_NUM_WORKERS", 1), ("SCAN_DEFAULT_BLOCKS", 0), ("SCAN_MIN_HEIGHT", 0), ("CACHE_TTL", 1)):
        try:
            value = int(config[key])
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid value '{config[key]}' ({key})") from e
        if value < minimum:
            raise ConfigurationError(f"Invalid value '{value}' ({key}), expected at least {minimum}")
