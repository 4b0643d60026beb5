from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from ..core.constants import DEFAULT_MINISTRIES
from .connection import DatabaseConnection, DBConfig
from .mysql_base import db_cursor, fetchall

logger = logging.getLogger(__name__)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?m)^\s*--.*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema/seed files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    conn_factory = DatabaseConnection(DBConfig.from_dict(db_config))
    conn = conn_factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{conn_factory.config.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_sql_file(db_config: dict, *, sql_path: str | Path) -> int:
    """Execute every statement of ``sql_path``; returns the statement count."""
    conn_factory = DatabaseConnection(DBConfig.from_dict(db_config))
    sql = _strip_create_db_and_use(Path(sql_path).read_text(encoding="utf-8"))

    count = 0
    with db_cursor(conn_factory, dictionary=False) as (_, cur):
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
            count += 1
    logger.info("Applied %s (%d statements)", Path(sql_path).name, count)
    return count


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    apply_sql_file(db_config, sql_path=schema_path)


def ensure_default_ministries(db_config: dict) -> int:
    """Insert the default ministries that are missing; returns inserted count."""
    conn_factory = DatabaseConnection(DBConfig.from_dict(db_config))
    inserted = 0
    with db_cursor(conn_factory) as (_, cur):
        cur.execute("SELECT name FROM ministries")
        existing = {r["name"] for r in fetchall(cur)}
        for _, name in DEFAULT_MINISTRIES:
            if name in existing:
                continue
            cur.execute("INSERT INTO ministries(name) VALUES(%s)", (name,))
            inserted += 1
    return inserted


def list_tables(db_config: dict) -> list[str]:
    conn_factory = DatabaseConnection(DBConfig.from_dict(db_config))
    with db_cursor(conn_factory, dictionary=False) as (_, cur):
        cur.execute("SHOW TABLES")
        return [str(r[0]) for r in cur.fetchall()]
