from __future__ import annotations

import math
from typing import Optional

from ..core.constants import DEFAULT_MINISTRY_PAGE_SIZE, MAX_MINISTRY_PAGE_SIZE
from ..core.exceptions import ValidationError
from .model import Ministry, MinistryPage
from .repository import MinistryRepository


class MinistryService:
    """Read-only ministry listing used by the check-in selector."""

    def __init__(self, ministries: MinistryRepository):
        self._ministries = ministries

    def list(self, page: int = 1, page_size: int = DEFAULT_MINISTRY_PAGE_SIZE) -> MinistryPage:
        page = int(page)
        if page < 1:
            raise ValidationError("page must be >= 1")
        page_size = max(1, min(int(page_size), MAX_MINISTRY_PAGE_SIZE))

        total = self._ministries.count()
        items = self._ministries.list_page(offset=(page - 1) * page_size, limit=page_size)
        return MinistryPage(
            items=tuple(items),
            total=total,
            page=page,
            total_pages=max(1, math.ceil(total / page_size)),
        )

    def get(self, ministry_id: int) -> Optional[Ministry]:
        return self._ministries.get_by_id(ministry_id)
