#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (C) 2022-2022 Riku Block
# All rights reserved.
#
# This file is part of XScan.

import logging

from sqlalchemy import (
    create_engine,
    inspect,
)
from sqlalchemy.orm import sessionmaker

from . import orm

log = logging.getLogger(__name__)


class FusionSQL(object):

    def __init__(self, conn: str, verbose: bool = False) -> None:
        """
        Manages sqlalchemy engine and session factory.

        The handle is passed explicitly to every component that needs it and has an explicit
        lifecycle: use it as a context manager (or call ``close()``) so pooled connections are
        released on every exit path.

        :param conn: sqlalchemy connection string
        :param verbose: enable sqlalchemy verbosity
        """
        assert isinstance(conn, str)
        assert isinstance(verbose, bool)

        self._engine = create_engine(conn, echo=False, pool_pre_ping=True)

        if verbose:
            logging.getLogger("sqlalchemy.engine").setLevel(logging.DEBUG)

        self._session = sessionmaker(
            bind=self._engine,
            autoflush=True,
            expire_on_commit=False,
        )
        self._closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def session(self):
        """
        Factory session object

        The returned object should be used in a context.

        Usage:

        # closes the session
        with FusionSQL.session() as session:
            session.add(some_object)
            session.commit()

        # auto commits the transaction, closes the session
        with FusionSQL.session.begin() as session:
            session.add(some_object)

        """
        assert not self._closed, "database handle already closed"
        return self._session

    @property
    def engine(self):
        return self._engine

    @property
    def orm(self):
        """
        Convenience reference to the orm module
        """
        return orm

    def create_all(self) -> None:
        """
        Create all tables that don't exist yet (testing and local development only,
        production schemas are managed by alembic)

        :return:
        """
        orm.Base.metadata.create_all(self._engine)

    def missing_tables(self) -> list:
        """
        Names of model tables not present in the database

        :return:
        """
        inspector = inspect(self._engine)
        existing = set(inspector.get_table_names(schema=orm.Base.metadata.schema))
        return sorted(t.name for t in orm.Base.metadata.sorted_tables if t.name not in existing)

    def close(self) -> None:
        if not self._closed:
            log.info("Closing database connections")
            self._engine.dispose()
            self._closed = True
