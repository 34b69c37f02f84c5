"""Database engines and session factory.

Both an asynchronous engine (used at startup to create the tables) and a
synchronous engine (used by the routers through ``get_db``) are built from
``settings.DATABASE_URL``. Local development falls back to SQLite when the
hosted PostgreSQL instance cannot be reached.
"""

from __future__ import annotations

import logging
import os
import ssl
from time import perf_counter
from typing import Any

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import URL, make_url
from sqlalchemy.exc import ArgumentError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import sessionmaker

from logitrack.core.config import settings

logger = logging.getLogger(__name__)

SQLITE_FALLBACK_URL = "sqlite+aiosqlite:///./logitrack_local.db"


def _ssl_context_for(mode: str, root_cert: str | None) -> ssl.SSLContext:
    """Build an SSL context following libpq ``sslmode`` semantics."""

    context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
    if root_cert:
        context.load_verify_locations(cafile=root_cert)

    if mode in {"verify-ca", "verify-full"}:
        context.check_hostname = mode == "verify-full"
    else:
        # require/prefer/allow only ask for encryption.
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def _prepare_asyncpg_connection(url: str) -> tuple[str, dict[str, object]]:
    """asyncpg rejects libpq query parameters; turn them into ``connect_args``."""

    try:
        parsed_url = make_url(url)
    except ArgumentError:
        return url, {}

    if not parsed_url.drivername.startswith("postgresql+asyncpg"):
        return url, {}

    query = dict(parsed_url.query)
    sslmode = query.pop("sslmode", None)
    sslrootcert = query.pop("sslrootcert", None)

    connect_args: dict[str, object] = {}
    if isinstance(sslmode, str):
        mode = sslmode.lower()
        if mode == "disable":
            connect_args["ssl"] = False
        elif mode in {"allow", "prefer", "require", "verify-ca", "verify-full"}:
            connect_args["ssl"] = _ssl_context_for(mode, sslrootcert)
    elif sslrootcert:
        connect_args["ssl"] = _ssl_context_for("require", sslrootcert)

    sanitized_url = parsed_url.set(query=query).render_as_string(hide_password=False)
    return sanitized_url, connect_args


def _derive_sync_connection_parameters(async_url: str) -> tuple[str, dict[str, Any]]:
    """Return the synchronous URL matching the async configuration."""

    parsed_url: URL = make_url(async_url)
    drivername = parsed_url.drivername
    connect_args: dict[str, Any] = {}

    if drivername.startswith("postgresql+"):
        parsed_url = parsed_url.set(drivername="postgresql+psycopg2")
    elif drivername == "sqlite+aiosqlite":
        parsed_url = parsed_url.set(drivername="sqlite")
        connect_args["check_same_thread"] = False

    return parsed_url.render_as_string(hide_password=False), connect_args


def _should_enable_sqlite_fallback() -> bool:
    if os.getenv("DISABLE_SQLITE_FALLBACK") == "1":
        return False
    return (settings.ENVIRONMENT or "").lower() in {"development", "local"}


def _install_slow_query_logger(engine: Engine) -> None:
    """Warn when a statement exceeds ``SQLALCHEMY_SLOW_QUERY_THRESHOLD_MS``."""

    threshold_ms = max(settings.SQLALCHEMY_SLOW_QUERY_THRESHOLD_MS or 0, 0)
    if threshold_ms == 0:
        return

    def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        context._logitrack_query_start = perf_counter()

    def _after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        start = getattr(context, "_logitrack_query_start", None)
        if start is None:
            return

        elapsed_ms = (perf_counter() - start) * 1000.0
        if elapsed_ms < threshold_ms:
            return

        snippet = " ".join(str(statement).split())
        if len(snippet) > 200:
            snippet = snippet[:197] + "..."
        logger.warning("SQL lente (%.1f ms) - %s", elapsed_ms, snippet)

    event.listen(engine, "before_cursor_execute", _before_cursor_execute)
    event.listen(engine, "after_cursor_execute", _after_cursor_execute)


# These globals are populated by ``configure_database``.
async_engine: AsyncEngine
sync_engine: Engine
SessionLocal: sessionmaker


def configure_database(database_url: str | None = None, *, allow_fallback: bool = True) -> None:
    """Initialise the engines and session factory.

    When the configured database cannot be reached in development the
    application switches to a local SQLite file so the API can still boot.
    """

    global async_engine, sync_engine, SessionLocal

    target_url = str(database_url or settings.DATABASE_URL)
    async_url, async_connect_args = _prepare_asyncpg_connection(target_url)

    logger.info("Configuration de la base de données: %s", make_url(async_url).render_as_string())

    candidate_async_engine = create_async_engine(
        async_url,
        echo=False,
        connect_args=async_connect_args,
    )

    sync_url, sync_connect_args = _derive_sync_connection_parameters(async_url)
    candidate_sync_engine = create_engine(
        sync_url,
        pool_pre_ping=True,
        connect_args=sync_connect_args,
    )
    _install_slow_query_logger(candidate_sync_engine)

    try:
        with candidate_sync_engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except (OperationalError, OSError) as exc:
        if allow_fallback and _should_enable_sqlite_fallback():
            logger.warning(
                "Impossible de joindre la base de données (%s). Bascule automatique vers SQLite.",
                exc,
            )
            candidate_sync_engine.dispose()
            configure_database(SQLITE_FALLBACK_URL, allow_fallback=False)
            return

        logger.error("Connexion à la base de données échouée: %s", exc)
        raise

    async_engine = candidate_async_engine
    sync_engine = candidate_sync_engine
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=sync_engine)


# Initialise the engines at import time so the rest of the application can use
# them immediately.
configure_database()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
