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
    Type,
)

import logging

import sqlalchemy.exc
from sqlalchemy import (
    func,
    select,
)

from . import orm
from .pgsql import FusionSQL

log = logging.getLogger(__name__)

# The stores are the only components with write authority over durable state. Each write is a
# short, self-contained database transaction (one record) so that concurrent writers for the
# same height only rely on per-record atomicity, enforced by the unique constraints.


class ProgressStore(object):

    def __init__(self, db: FusionSQL) -> None:
        """
        Durable log of fully processed block heights

        :param db: database service
        """
        self._db = db

    def is_processed(self, height: int) -> bool:
        with self._db.session() as session:
            entry = session.execute(
                select(orm.ProcessedBlock.id)
                    .filter(orm.ProcessedBlock.blockNumber == height)
            ).first()
        return entry is not None

    def mark_processed(self, height: int) -> bool:
        """
        Upsert the watermark entry of ``height``

        :param height: block height
        :return: True if the entry was newly created, False if it already existed (timestamp refreshed)
        """
        def load(s) -> Optional[orm.ProcessedBlock]:
            return s.execute(
                select(orm.ProcessedBlock)
                    .filter(orm.ProcessedBlock.blockNumber == height)
            ).scalar()

        with self._db.session() as session:
            entry = load(session)

            if entry is None:
                session.add(orm.ProcessedBlock(blockNumber=height))

                # handle race conditions
                try:
                    session.commit()
                    return True
                except sqlalchemy.exc.IntegrityError:
                    session.rollback()
                    entry = load(session)
                    if entry is None:
                        raise

            entry.processedAt = orm.utcnow()
            session.commit()

        return False

    def get_last_processed(self) -> int:
        """
        Highest processed height

        :return: height, 0 if nothing has been processed yet
        """
        with self._db.session() as session:
            height = session.execute(
                select(func.max(orm.ProcessedBlock.blockNumber))
            ).scalar()
        return int(height) if height is not None else 0

    def count(self) -> int:
        with self._db.session() as session:
            return session.execute(
                select(func.count(orm.ProcessedBlock.id))
            ).scalar()


class TransactionStore(object):

    def __init__(self, db: FusionSQL) -> None:
        """
        Durable, deduplicated record of matched transactions and detected tokens

        :param db: database service
        """
        self._db = db

    def _insert(self, model: Type[orm.Base], key: str, record: Dict[str, Any]) -> bool:
        """
        Insert ``record`` unless an entry with the same unique ``key`` already exists.

        :param model: orm class
        :param key: name of the unique column
        :param record: column values
        :return: True if inserted, False if the entry already existed
        """
        column = getattr(model, key)

        def exists(s) -> bool:
            return s.execute(
                select(model.id)
                    .filter(column == record[key])
            ).first() is not None

        with self._db.session() as session:
            if exists(session):
                log.debug(f"Skipping existing {model.__name__} '{record[key]}'")
                return False

            session.add(model(**record))

            # handle race conditions
            try:
                session.commit()
            except sqlalchemy.exc.IntegrityError:
                session.rollback()
                if exists(session):
                    log.debug(f"Skipping existing {model.__name__} '{record[key]}'")
                    return False
                raise

        return True

    def save_transaction(self, record: Dict[str, Any]) -> bool:
        """
        Idempotently store a transaction record

        :param record: normalized transaction record (see ``xscan.scan.record``)
        :return: True if newly inserted, False if the hash was already present
        """
        return self._insert(orm.Transaction, "hash", record)

    def save_token(self, record: Dict[str, Any]) -> bool:
        """
        Idempotently store a token record

        :param record: token record keyed by ``address``
        :return: True if newly inserted, False if the address was already present
        """
        return self._insert(orm.Token, "address", record)

    def get_transaction(self, tx_hash: str) -> Optional[orm.Transaction]:
        with self._db.session() as session:
            return session.execute(
                select(orm.Transaction)
                    .filter(orm.Transaction.hash == tx_hash)
            ).scalar()

    def get_token(self, address: str) -> Optional[orm.Token]:
        with self._db.session() as session:
            return session.execute(
                select(orm.Token)
                    .filter(orm.Token.address == address.lower())
            ).scalar()
