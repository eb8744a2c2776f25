from __future__ import annotations

import json
from contextlib import contextmanager
from collections.abc import Generator
from typing import Any

from flask import Flask, g
from sqlalchemy import Text, create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.types import TypeDecorator


def init_db(app: Flask) -> None:
    db_url = app.config["DATABASE_URL"]
    is_postgres = db_url.startswith("postgres")
    engine_kwargs: dict[str, object] = {
        "future": True,
        "pool_pre_ping": True,
    }
    if is_postgres:
        engine_kwargs.update(
            {
                "pool_recycle": 1800,
                "pool_size": 5,
                "max_overflow": 10,
                "pool_timeout": 30,
            }
        )
    engine = create_engine(db_url, **engine_kwargs)
    if db_url.startswith("sqlite"):
        @event.listens_for(engine, "connect")
        def _sqlite_foreign_keys(dbapi_connection, connection_record):  # type: ignore[no-redef]
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    app.extensions["sqlalchemy_engine"] = engine
    app.extensions["sqlalchemy_sessionmaker"] = sessionmaker(
        bind=engine,
        class_=Session,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        future=True,
    )


def db_session(app: Flask | None = None) -> Session:
    """
    Request-scoped session. Use inside request handlers.

    Everything a handler writes goes out in a single ``commit()``, so one request
    is one unit of work; an exception before the commit leaves nothing behind.
    """
    if hasattr(g, "db_session") and g.db_session is not None:
        return g.db_session
    if app is None:
        from flask import current_app

        app = current_app
    sm = app.extensions["sqlalchemy_sessionmaker"]
    g.db_session = sm()  # type: ignore[assignment]
    return g.db_session


def teardown_db_session(_exc: BaseException | None) -> None:
    s: Session | None = getattr(g, "db_session", None)
    if s is not None:
        try:
            s.close()
        except Exception:
            pass
        g.db_session = None


@contextmanager
def session_scope(app: Flask) -> Generator[Session, None, None]:
    """
    Non-request helper for scripts and tests: yields a session and commits/rolls back.
    """
    sm = app.extensions["sqlalchemy_sessionmaker"]
    s: Session = sm()
    try:
        yield s
        s.commit()
    except Exception:
        s.rollback()
        raise
    finally:
        s.close()


class JSONDecodeError(ValueError):
    pass


class _JSONText(TypeDecorator):
    """JSON stored as text, checked on the way in and on the way out."""

    impl = Text
    cache_ok = True

    def check(self, value: Any) -> Any:
        raise NotImplementedError

    def empty(self) -> Any:
        raise NotImplementedError

    def process_bind_param(self, value: Any, dialect) -> str:
        if value is None:
            value = self.empty()
        return json.dumps(self.check(value))

    def process_result_value(self, value: str | None, dialect) -> Any:
        if value is None or value == "":
            return self.empty()
        try:
            decoded = json.loads(value)
        except json.JSONDecodeError as e:
            raise JSONDecodeError(f"Stored JSON column is not valid JSON: {e}") from e
        return self.check(decoded)


class JSONList(_JSONText):
    """List of strings (tags, interests, enabled module ids, poll options)."""

    cache_ok = True

    def empty(self) -> list[str]:
        return []

    def check(self, value: Any) -> list[str]:
        if isinstance(value, (tuple, set, frozenset)):
            value = list(value)
        if not isinstance(value, list):
            raise JSONDecodeError(f"Expected a JSON list, got {type(value).__name__}")
        for item in value:
            if not isinstance(item, str):
                raise JSONDecodeError("Expected a list of strings")
        return value


class JSONObject(_JSONText):
    """JSON object keyed by strings (theme snapshots, module configs, schemas)."""

    cache_ok = True

    def empty(self) -> dict[str, Any]:
        return {}

    def check(self, value: Any) -> dict[str, Any]:
        if not isinstance(value, dict):
            raise JSONDecodeError(f"Expected a JSON object, got {type(value).__name__}")
        return value
