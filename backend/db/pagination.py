"""Page arithmetic for offset-paginated queries."""

from __future__ import annotations

import math


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit > 0 else 0
