from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence


@dataclass(frozen=True)
class Ministry:
    ministry_id: int
    name: str
    description: Optional[str] = None

    def to_dict(self) -> dict:
        return {"id": self.ministry_id, "name": self.name, "description": self.description}


@dataclass(frozen=True)
class MinistryPage:
    items: Sequence[Ministry] = field(default_factory=tuple)
    total: int = 0
    page: int = 1
    total_pages: int = 1

    def to_dict(self) -> dict:
        return {
            "data": [m.to_dict() for m in self.items],
            "total": self.total,
            "page": self.page,
            "totalPages": self.total_pages,
        }
