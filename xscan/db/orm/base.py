#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (C) 2022-2022 Riku Block
# All rights reserved.
#
# This file is part of XScan.

import datetime

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    MetaData,
)
from sqlalchemy.orm import declarative_base

from xscan.config import CONFIG as C

Base = declarative_base(
    metadata=MetaData(
        schema=C["DB_SCHEMA"],
    ),
)


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class BaseModel(object):
    id = Column(Integer, primary_key=True, unique=True, autoincrement=True)


class BaseModelCreated(BaseModel):
    createdAt = Column(DateTime(timezone=True), default=utcnow, nullable=False)
