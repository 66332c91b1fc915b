#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (C) 2022-2022 Riku Block
# All rights reserved.
#
# This file is part of XScan.

from typing import Optional

import json

from pathlib import Path

CONTRACT_DIR = Path(__file__).resolve().parent


class Info(object):
    """
    Static contract information (address and ABI) shipped with the package.
    """

    def __init__(self, address: Optional[str], abi_file: str) -> None:
        """
        Contract information

        :param address: contract address, None for an interface shared by many contracts
        :param abi_file: json file (relative to the package contract directory) containing the ABI
        """
        self.address = address

        with open(CONTRACT_DIR / abi_file, "r", encoding="utf-8") as f:
            data = json.load(f)
            self.abi = data["abi"]

    @property
    def functions(self) -> set:
        return {entry["name"] for entry in self.abi if entry.get("type") == "function"}

    def __repr__(self):
        return f"Info <address={self.address} functions={len(self.functions)}>"


# minimal token capability interface, only name/symbol/decimals are required by the probe
erc20 = Info(
    address=None,
    abi_file="ERC20.json",
)
