from __future__ import annotations

import logging
import os
from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

load_dotenv()

logger = logging.getLogger(__name__)


def database_url_from_env() -> str:
    database_url = os.getenv("DATABASE_URL") or os.getenv("SQLALCHEMY_DATABASE_URL")
    if not database_url:
        raise RuntimeError(
            "DATABASE_URL or SQLALCHEMY_DATABASE_URL must be set to store insight settings."
        )
    return database_url


def build_engine(database_url: str):
    connect_args = {}
    if database_url.startswith("sqlite"):
        # TestClient and the sync endpoint threadpool share one SQLite connection pool.
        connect_args["check_same_thread"] = False
    return create_engine(database_url, future=True, connect_args=connect_args)


DATABASE_URL = database_url_from_env()
engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


class Base(DeclarativeBase):
    pass


def create_tables(bind=None) -> None:
    """
    Create `insight_configs` and `insight_dismissals` if they are missing.

    Runs on app startup; existing tables and rows are left untouched.
    """
    from backend.app import models  # noqa: F401

    target = bind if bind is not None else engine
    Base.metadata.create_all(bind=target, checkfirst=True)
    logger.info("Insight tables ready on %s", target.url.render_as_string(hide_password=True))


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
