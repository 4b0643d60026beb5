from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Person
from .repository import PersonRepository

_COLUMNS = "person_id, first_name, last_name, email, phone, ministry_id, created_at"


def row_to_person(row: Dict[str, Any], *, prefix: str = "") -> Person:
    return Person(
        person_id=int(row[f"{prefix}person_id"]),
        first_name=row[f"{prefix}first_name"],
        last_name=row[f"{prefix}last_name"],
        email=row.get(f"{prefix}email"),
        phone=row.get(f"{prefix}phone"),
        ministry_id=row.get(f"{prefix}ministry_id"),
        created_at=row.get(f"{prefix}created_at"),
    )


class MySQLPersonRepository(PersonRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, person_id: int) -> Optional[Person]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM people WHERE person_id=%s", (int(person_id),))
            row = fetchone(cur)
            return row_to_person(row) if row else None

    def find_by_name(self, first_name: str, last_name: str) -> Sequence[Person]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM people
                WHERE LOWER(TRIM(first_name))=LOWER(%s) AND LOWER(TRIM(last_name))=LOWER(%s)
                ORDER BY person_id ASC
                """,
                (first_name.strip(), last_name.strip()),
            )
            return [row_to_person(r) for r in fetchall(cur)]

    def create_person(
        self,
        *,
        first_name: str,
        last_name: str,
        email: Optional[str],
        phone: Optional[str],
        ministry_id: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO people(first_name, last_name, email, phone, ministry_id)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (first_name, last_name, email, phone, ministry_id),
            )
            return int(cur.lastrowid)
