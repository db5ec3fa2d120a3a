from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base

logger = logging.getLogger(__name__)


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


def get_engine(database_url: str, poolclass=None) -> Engine:
    engine_kwargs = {}
    connect_args = {}

    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        # one shared connection, otherwise every checkout sees an empty database
        if poolclass is None and _is_memory_sqlite(database_url):
            poolclass = StaticPool

    if database_url.startswith("postgresql"):
        connect_args["connect_timeout"] = 10
        engine_kwargs["pool_pre_ping"] = True
        engine_kwargs["pool_recycle"] = 3600  # 1 hour

    if poolclass:
        engine_kwargs["poolclass"] = poolclass

    return create_engine(database_url, connect_args=connect_args, **engine_kwargs)


class Database:
    """Owns the engine and session factory for the token store."""

    def __init__(self, database_url: str, poolclass=None):
        self.url = database_url
        self.engine = get_engine(database_url, poolclass=poolclass)
        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=self.engine
        )

    def create_all(self) -> None:
        Base.metadata.create_all(bind=self.engine)
        logger.info("Schema ready on %s", self.engine.url.render_as_string(hide_password=True))

    @contextmanager
    def session(self) -> Iterator[Session]:
        with self.SessionLocal() as db:
            yield db

    def dispose(self) -> None:
        self.engine.dispose()
