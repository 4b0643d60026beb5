from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Person


class PersonRepository(Protocol):
    """Repository interface for people.

    Services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, person_id: int) -> Optional[Person]:
        raise NotImplementedError

    def find_by_name(self, first_name: str, last_name: str) -> Sequence[Person]:
        """Case-insensitive match on trimmed names, oldest registration first."""
        raise NotImplementedError

    def create_person(
        self,
        *,
        first_name: str,
        last_name: str,
        email: Optional[str],
        phone: Optional[str],
        ministry_id: Optional[int],
    ) -> int:
        raise NotImplementedError
