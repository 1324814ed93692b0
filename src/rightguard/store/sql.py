"""SQLAlchemy metadata and engine helpers for the Right Guard tables."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import sqlalchemy as sa
from sqlalchemy import Engine
from sqlalchemy.dialects import postgresql
from sqlalchemy.engine import URL
from sqlalchemy.orm import sessionmaker

from rightguard.constants import DEFAULT_JURISDICTION, TABLES
from rightguard.settings import Settings, get_settings

JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql")
TIMESTAMP = sa.DateTime(timezone=True)
ID_TYPE = sa.String(length=64)

METADATA = sa.MetaData()

users = sa.Table(
    TABLES["users"],
    METADATA,
    sa.Column("user_id", ID_TYPE, primary_key=True),
    sa.Column("farcaster_profile", sa.Text(), nullable=True, unique=True),
    sa.Column("selected_state", sa.Text(), nullable=False, server_default=DEFAULT_JURISDICTION),
    sa.Column("premium_features", JSON_TYPE, nullable=False),
    sa.Column("created_at", TIMESTAMP, nullable=False),
    sa.Column("updated_at", TIMESTAMP, nullable=False),
)

legal_guides = sa.Table(
    TABLES["legal_guides"],
    METADATA,
    sa.Column("guide_id", ID_TYPE, primary_key=True),
    sa.Column("state", sa.Text(), nullable=False),
    sa.Column("language", sa.String(length=8), nullable=False),
    sa.Column("title", sa.Text(), nullable=False),
    sa.Column("content", sa.Text(), nullable=False),
    sa.Column("script", sa.Text(), nullable=False),
    sa.Column("created_at", TIMESTAMP, nullable=False),
    sa.Column("updated_at", TIMESTAMP, nullable=False),
)
sa.Index("idx_legal_guides_state_language", legal_guides.c.state, legal_guides.c.language)

incident_records = sa.Table(
    TABLES["incident_records"],
    METADATA,
    sa.Column("record_id", ID_TYPE, primary_key=True),
    sa.Column("user_id", ID_TYPE, nullable=False),
    sa.Column("timestamp", TIMESTAMP, nullable=False),
    sa.Column("latitude", sa.Float(), nullable=False),
    sa.Column("longitude", sa.Float(), nullable=False),
    sa.Column("address", sa.Text(), nullable=True),
    sa.Column("media_url", sa.Text(), nullable=True),
    sa.Column("notes", sa.Text(), nullable=True),
    sa.Column("created_at", TIMESTAMP, nullable=False),
)
sa.Index("idx_incident_records_user_created", incident_records.c.user_id, incident_records.c.created_at)

alert_logs = sa.Table(
    TABLES["alert_logs"],
    METADATA,
    sa.Column("alert_id", ID_TYPE, primary_key=True),
    sa.Column("user_id", ID_TYPE, nullable=False),
    sa.Column("incident_record_id", sa.Text(), nullable=False, server_default=""),
    sa.Column("recipient", sa.Text(), nullable=False),
    sa.Column("timestamp", TIMESTAMP, nullable=False),
    sa.Column("status", sa.String(length=16), nullable=False),
    sa.Column("created_at", TIMESTAMP, nullable=False),
)
sa.Index("idx_alert_logs_user_created", alert_logs.c.user_id, alert_logs.c.created_at)

purchase_logs = sa.Table(
    TABLES["purchase_logs"],
    METADATA,
    sa.Column("purchase_id", ID_TYPE, primary_key=True),
    sa.Column("user_id", ID_TYPE, nullable=False),
    sa.Column("feature_key", sa.Text(), nullable=False),
    sa.Column("amount", sa.Float(), nullable=False),
    sa.Column("tx_hash", sa.Text(), nullable=False),
    sa.Column("created_at", TIMESTAMP, nullable=False),
)


def _resolve_database_url(settings: Settings | None = None) -> str:
    """Return the SQLAlchemy URL considering overrides and configured backend."""

    url_override = os.getenv("RIGHTGUARD_DATABASE_URL")
    if url_override:
        return url_override

    resolved = settings or get_settings()
    if resolved.storage.database_url:
        return resolved.storage.database_url

    backend = resolved.storage.structured_backend
    if backend == "sqlite":
        sqlite_path = Path(resolved.sqlite_path)
        sqlite_path.parent.mkdir(parents=True, exist_ok=True)
        return URL.create("sqlite", database=sqlite_path.as_posix()).render_as_string(hide_password=False)

    raise NotImplementedError(f"Structured backend '{backend}' requires storage.database_url")


def build_engine(*, echo: bool = False, settings: Settings | None = None) -> Engine:
    """Instantiate a SQLAlchemy engine aligned with project settings."""

    return _engine_for_url(_resolve_database_url(settings), echo=echo)


def _engine_for_url(url: str, *, echo: bool = False) -> Engine:
    connect_args: dict[str, Any] = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return sa.create_engine(url, echo=echo, future=True, pool_pre_ping=True, connect_args=connect_args)


def create_schema(engine: Engine) -> None:
    """Create any missing Right Guard tables (local and test databases only)."""

    METADATA.create_all(engine)


def session_factory(*, settings: Settings | None = None, create: bool = False) -> sessionmaker:
    """Return the sessionmaker for the active database, built once per URL."""

    return _session_factory_for_url(_resolve_database_url(settings), create)


@lru_cache(maxsize=None)
def _session_factory_for_url(url: str, create: bool) -> sessionmaker:
    engine = _engine_for_url(url)
    if create:
        create_schema(engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def reset_session_factories() -> None:
    """Forget cached sessionmakers so the next call builds a fresh engine."""

    _session_factory_for_url.cache_clear()
