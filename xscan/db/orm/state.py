#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (C) 2022-2022 Riku Block
# All rights reserved.
#
# This file is part of XScan.

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
)

from .base import (
    Base,
    BaseModel,
    utcnow,
)


class ProcessedBlock(BaseModel, Base):
    """
    Progress watermark, one entry per fully handled block height

    Note: The existence of an entry is the only signal that a height is done. It does not imply
          that any transaction of that block was stored.
    """
    __tablename__ = "processed_block"

    blockNumber = Column(BigInteger, unique=True, nullable=False)
    processedAt = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"ProcessedBlock(blockNumber={self.blockNumber})"
