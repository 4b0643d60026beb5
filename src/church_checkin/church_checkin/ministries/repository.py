from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Ministry


class MinistryRepository(Protocol):
    def get_by_id(self, ministry_id: int) -> Optional[Ministry]:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError

    def list_page(self, *, offset: int, limit: int) -> Sequence[Ministry]:
        """Ministries ordered by name."""
        raise NotImplementedError
