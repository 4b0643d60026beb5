from __future__ import annotations

from typing import Optional

from ..common.validators import require_non_empty
from .model import Person
from .repository import PersonRepository


class PersonService:
    """Use case: resolve a typed name to a registered person."""

    def __init__(self, people: PersonRepository):
        self._people = people

    def find_by_name(self, first_name: str, last_name: str) -> Optional[Person]:
        first = require_non_empty(first_name, "First name")
        last = require_non_empty(last_name, "Last name")
        matches = self._people.find_by_name(first, last)
        # Several people can share a name; the earliest registration wins.
        return matches[0] if matches else None

    def get(self, person_id: int) -> Optional[Person]:
        return self._people.get_by_id(person_id)
