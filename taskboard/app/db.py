from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from taskboard.app.config import get_settings

Base = declarative_base()


def make_engine(database_url: str) -> Engine:
    """Create an engine; SQLite needs cross-thread access for worker-thread sessions."""

    if not database_url.startswith("sqlite"):
        return create_engine(database_url, pool_pre_ping=True)

    connect_args = {"check_same_thread": False}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # A single shared connection, otherwise every session sees an empty database
        return create_engine(database_url, connect_args=connect_args, poolclass=StaticPool)
    return create_engine(database_url, connect_args=connect_args)


def make_sessionmaker(bind: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=bind)


DATABASE_URL = get_settings().database_url

engine = make_engine(DATABASE_URL)
SessionLocal = make_sessionmaker(engine)


def init_db(bind: Engine = engine) -> None:
    """Create tables if missing (safe no-op when they already exist)."""
    from taskboard.app import models  # noqa: F401  registers tables on Base

    Base.metadata.create_all(bind=bind)
