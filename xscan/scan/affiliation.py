#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (C) 2022-2022 Riku Block
# All rights reserved.
#
# This file is part of XScan.

from typing import (
    Iterable,
    Optional,
)

import abc

from xscan.util import normalize_address


class AffiliationRule(abc.ABC):
    """
    Decides whether a detected token belongs to the tracked project.

    Kept free of any chain I/O so rules can be swapped and tested in isolation.
    """

    @abc.abstractmethod
    def is_affiliated(self, name: str, symbol: str, creator: Optional[str]) -> bool:
        """
        :param name: token name
        :param symbol: token symbol
        :param creator: address that sent the contract creation transaction
        :return:
        """
        raise NotImplementedError

    def __call__(self, name: str, symbol: str, creator: Optional[str]) -> bool:
        return self.is_affiliated(name, symbol, creator)


class MarkerAffiliationRule(AffiliationRule):
    """
    Affiliated if the name or symbol contains one of the marker substrings (case-insensitive),
    or if the token was created by the known deployer address.

    Example:
        rule = MarkerAffiliationRule(markers=["sonicx", "sonic", "sonix"])
        rule("SonicX Token", "SNX", None) -> True
        rule("Pepe", "PEPE", None) -> False
    """

    def __init__(self, markers: Iterable[str], known_deployer: Optional[str] = None) -> None:
        self.markers = tuple(m.lower() for m in markers if m)
        self.known_deployer = normalize_address(known_deployer)

    def is_affiliated(self, name: str, symbol: str, creator: Optional[str]) -> bool:
        name = (name or "").lower()
        symbol = (symbol or "").lower()

        if any(m in name or m in symbol for m in self.markers):
            return True

        return self.known_deployer is not None and normalize_address(creator) == self.known_deployer

    def __repr__(self) -> str:
        return f"MarkerAffiliationRule(markers={self.markers} known_deployer={self.known_deployer})"
