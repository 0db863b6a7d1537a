"""Search service module composing the descriptor builder, dispatcher and shaper per request."""
from __future__ import annotations

import dataclasses
import logging
import time
from typing import Any, Optional

from .config import settings
from .descriptors import (
    STANDARD,
    TITLE_WEIGHTED,
    SearchDescriptor,
    build,
    build_autocomplete,
    query_text,
)
from .dispatcher import SearchDispatcher
from .errors import ValidationFailure
from .logging_utils import (
    DESCRIPTOR_BUILT,
    REQUEST_RECEIVED,
    RESULT_SHAPED,
    VALIDATION_FAILED,
    clear_request_context,
    log_stage,
    new_request_id,
    set_request_context,
)
from .models import AutocompleteResponse, Filters, SearchResponse
from .shaper import normalize_window, shape, shape_autocomplete


def _log_descriptor(descriptor: SearchDescriptor, started: float) -> None:
    log_stage(
        DESCRIPTOR_BUILT,
        duration_ms=(time.perf_counter() - started) * 1000,
        index=descriptor.index,
        descriptor=dataclasses.asdict(descriptor),
    )


async def _ranked_search(
    dispatcher: SearchDispatcher,
    mode: str,
    query: str,
    page: Optional[int],
    limit: Optional[int],
    *,
    filters: Optional[Filters] = None,
    title_weight: Any = None,
) -> SearchResponse:
    page_number, page_size, skip = normalize_window(page, limit)
    set_request_context(new_request_id(), mode, query or "", page_number, page_size)
    try:
        log_stage(REQUEST_RECEIVED, requested_page=page, requested_limit=limit)
        started = time.perf_counter()
        try:
            descriptor = build(query, mode, filters=filters, title_weight=title_weight)
        except ValidationFailure as exc:
            log_stage(VALIDATION_FAILED, note=exc.message, level=logging.WARNING)
            raise
        _log_descriptor(descriptor, started)

        if query_text(descriptor):
            total, ranked = await dispatcher.dispatch(descriptor, skip=skip, limit=page_size)
        else:
            total, ranked = 0, []

        response = shape(total, ranked, page_number, page_size, distinguish_best_match=True)
        shaped = ([response.best_match] if response.best_match else []) + response.movies
        log_stage(RESULT_SHAPED, shaped, total=response.pagination.total, pages=response.pagination.pages)
        return response
    finally:
        clear_request_context()


async def search_movies(
    dispatcher: SearchDispatcher,
    query: str,
    filters: Optional[Filters] = None,
    page: Optional[int] = 1,
    limit: Optional[int] = None,
) -> SearchResponse:
    """Fuzzy title/plot search with optional runtime, rating, year and genre filters."""
    if limit is None:
        limit = settings.default_page_size
    return await _ranked_search(dispatcher, STANDARD, query, page, limit, filters=filters)


async def search_movies_with_title_weight(
    dispatcher: SearchDispatcher,
    query: str,
    title_weight: Any = None,
    page: Optional[int] = 1,
    limit: Optional[int] = None,
) -> SearchResponse:
    """Title/plot search with the title match boosted by ``title_weight``."""
    if limit is None:
        limit = settings.default_page_size
    return await _ranked_search(dispatcher, TITLE_WEIGHTED, query, page, limit, title_weight=title_weight)


async def autocomplete_suggestions(dispatcher: SearchDispatcher, prefix: str) -> AutocompleteResponse:
    set_request_context(new_request_id(), "autocomplete", prefix or "", limit=settings.autocomplete_limit)
    try:
        log_stage(REQUEST_RECEIVED)
        started = time.perf_counter()
        descriptor = build_autocomplete(prefix)
        _log_descriptor(descriptor, started)

        candidates = await dispatcher.dispatch_autocomplete(descriptor) if descriptor.clause.query else []
        response = shape_autocomplete(candidates, settings.autocomplete_limit)
        log_stage(RESULT_SHAPED, response.suggestions)
        return response
    finally:
        clear_request_context()


__all__ = [
    "search_movies",
    "search_movies_with_title_weight",
    "autocomplete_suggestions",
]
