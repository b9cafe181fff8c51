from __future__ import annotations
import os
import logging
from datetime import datetime, timezone

from sqlalchemy import (
    create_engine, MetaData, Table, Column, Index, UniqueConstraint,
    String, Boolean, BigInteger, Integer, Text,
    select, insert, and_,
)
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

DEFAULT_LIST_NAME = "My Day"

def normalize_database_url(url: str) -> str:
    return "postgresql://" + url[len("postgres://"):] if url.startswith("postgres://") else url

def get_engine() -> Engine:
    db_url = os.getenv("DATABASE_URL", "").strip()
    if db_url:
        db_url = normalize_database_url(db_url)
        if db_url.startswith("postgresql://") and "+psycopg2" not in db_url:
            db_url = db_url.replace("postgresql://", "postgresql+psycopg2://", 1)
    else:
        db_url = "sqlite:///./tasks.db"
    return create_engine(db_url, future=True, pool_pre_ping=True)

engine = get_engine()
metadata = MetaData()

users = Table(
    "users", metadata,
    Column("id", String, primary_key=True),
    Column("username", String(255), nullable=False, unique=True),
    Column("password_hash", String, nullable=False),
    Column("created_at", BigInteger, nullable=False),
)

lists = Table(
    "lists", metadata,
    Column("id", String, primary_key=True),
    Column("user_id", String, nullable=False, index=True),
    Column("name", String(255), nullable=False),
    Column("is_default", Boolean, nullable=False, server_default="false"),
    Column("created_at", BigInteger, nullable=False),
    UniqueConstraint("user_id", "name", name="ux_lists_user_name"),
)

tasks = Table(
    "tasks", metadata,
    Column("id", String, primary_key=True),
    Column("list_id", String, nullable=False, index=True),
    Column("user_id", String, nullable=False, index=True),
    Column("title", Text, nullable=False),
    Column("is_completed", Boolean, nullable=False, server_default="false"),
    Column("is_important", Boolean, nullable=False, server_default="false"),
    Column("position", Integer, nullable=False, server_default="0"),
    Column("created_at", BigInteger, nullable=False),
    Column("updated_at", BigInteger, nullable=False),
    Column("completed_at", BigInteger, nullable=True),
    Index("ix_tasks_list_position", "list_id", "position"),
)

def now_ts() -> int:
    return int(datetime.now(tz=timezone.utc).timestamp())

def gen_id() -> str:
    return f"{now_ts()}_{os.urandom(4).hex()}"

def init_db():
    """Create tables if missing."""
    metadata.create_all(engine)

def ensure_default_list(conn, user_id: str) -> str:
    """Return the user's default ("My Day") list id, creating it if missing."""
    row = conn.execute(
        select(lists.c.id).where(and_(lists.c.user_id == user_id, lists.c.is_default.is_(True)))
    ).first()
    if row:
        return row[0]
    lid = gen_id()
    conn.execute(insert(lists).values(
        id=lid, user_id=user_id, name=DEFAULT_LIST_NAME, is_default=True, created_at=now_ts(),
    ))
    logger.info("created default list %s for user %s", lid, user_id)
    return lid
