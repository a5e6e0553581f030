"""SQLAlchemy engine and session factory helpers."""

from __future__ import annotations

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()


def create_db_engine(database_url: str) -> Engine:
    """Create an engine tuned for the configured backend."""

    engine_kwargs: dict = {"pool_pre_ping": True}
    connect_args: dict = {}

    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        if database_url in {"sqlite://", "sqlite:///:memory:"}:
            # One shared connection, otherwise each session sees an empty database.
            engine_kwargs["poolclass"] = StaticPool
    elif database_url.startswith("postgresql"):
        engine_kwargs.update(
            {
                "pool_size": 5,
                "max_overflow": 10,
                "pool_timeout": 30,
                "pool_recycle": 1800,
            }
        )

    engine = create_engine(database_url, connect_args=connect_args, **engine_kwargs)
    logger.info("Database engine created for %s", engine.url.render_as_string(hide_password=True))
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    """Return a session factory whose objects stay readable after commit."""

    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create all tables known to the declarative base."""

    # Register the mapped classes before creating tables.
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
