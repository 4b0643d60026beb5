from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Ministry
from .repository import MinistryRepository


class MySQLMinistryRepository(MinistryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, ministry_id: int) -> Optional[Ministry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT ministry_id, name, description FROM ministries WHERE ministry_id=%s",
                (int(ministry_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Ministry(ministry_id=int(r["ministry_id"]), name=r["name"], description=r.get("description"))

    def count(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM ministries")
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def list_page(self, *, offset: int, limit: int) -> Sequence[Ministry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT ministry_id, name, description
                FROM ministries
                ORDER BY name ASC
                LIMIT %s OFFSET %s
                """,
                (int(limit), int(offset)),
            )
            return [
                Ministry(ministry_id=int(r["ministry_id"]), name=r["name"], description=r.get("description"))
                for r in fetchall(cur)
            ]
