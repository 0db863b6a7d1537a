"""Pagination arithmetic and response envelopes for ranked results."""
from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

from .models import AutocompleteResponse, Movie, Pagination, SearchResponse, Suggestion

AUTOCOMPLETE_LIMIT = 10

# $skip and $limit are encoded as BSON int64.
MAX_WINDOW = 2**63 - 1


def normalize_window(page: Optional[int], limit: Optional[int]) -> Tuple[int, int, int]:
    """Coerce page and limit to at least 1 and return ``(page, limit, skip)``.

    Both are clamped so that ``skip`` and ``limit`` stay within ``MAX_WINDOW``;
    a page past that bound is simply an empty page.
    """
    limit = min(max(1, int(limit or 0)), MAX_WINDOW)
    page = min(max(1, int(page or 0)), MAX_WINDOW // limit + 1)
    return page, limit, (page - 1) * limit


def page_count(total: int, limit: int) -> int:
    return max(0, math.ceil(max(0, total) / max(1, limit)))


def shape(
    total: int,
    page: Sequence[Movie],
    requested_page: Optional[int],
    requested_limit: Optional[int],
    distinguish_best_match: bool = True,
) -> SearchResponse:
    """Assemble the search envelope from one ranked page.

    The first record becomes ``best_match`` only on page 1, where it is the
    global top hit; on later pages it is merely the head of the slice and the
    page is returned whole. Engine order is kept as-is.
    """
    page_number, limit, _ = normalize_window(requested_page, requested_limit)
    records = list(page)

    best_match = None
    if distinguish_best_match and records and page_number == 1:
        best_match, records = records[0], records[1:]

    return SearchResponse(
        best_match=best_match,
        movies=records,
        pagination=Pagination(total=max(0, total), page=page_number, pages=page_count(total, limit)),
    )


def shape_autocomplete(candidates: Sequence[Suggestion], limit: int = AUTOCOMPLETE_LIMIT) -> AutocompleteResponse:
    return AutocompleteResponse(suggestions=list(candidates)[: max(0, limit)])


__all__ = ["AUTOCOMPLETE_LIMIT", "MAX_WINDOW", "normalize_window", "page_count", "shape", "shape_autocomplete"]
