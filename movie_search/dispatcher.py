"""Search dispatcher: the only component that talks to the Atlas Search engine."""
from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Tuple

from .atlas import autocomplete_pipeline, search_pipeline
from .db import ENGINE_ERRORS
from .descriptors import AutocompleteProbe, SearchDescriptor
from .errors import EngineUnavailable
from .logging_utils import ENGINE_DISPATCHED, ENGINE_FAILED, log_stage
from .models import Movie, Suggestion
from .normalize import movie_from_document, sanitize_document

logger = logging.getLogger("uvicorn.error")


def parse_facet(result: List[Dict[str, Any]]) -> Tuple[int, List[Dict[str, Any]]]:
    """Split the single ``$facet`` document into the match count and the page of documents."""
    if not result:
        return 0, []
    facet = result[0] or {}
    metadata = facet.get("metadata") or []
    total = int((metadata[0] or {}).get("total", 0) or 0) if metadata else 0
    return total, list(facet.get("data") or [])


class SearchDispatcher:
    """Runs compiled descriptors against an injected engine.

    ``engine`` only needs an ``acquire()`` async context manager yielding an
    object with Motor's ``aggregate`` method. Each call acquires it once and
    releases it on every exit path. Failures are not retried.
    """

    def __init__(self, engine: Any) -> None:
        self.engine = engine

    async def _aggregate(self, pipeline: List[Dict[str, Any]]) -> Tuple[List[Dict[str, Any]], float]:
        start = time.perf_counter()
        try:
            async with self.engine.acquire() as coll:
                docs = [doc async for doc in coll.aggregate(pipeline)]
        except ENGINE_ERRORS as exc:
            log_stage(
                ENGINE_FAILED,
                duration_ms=(time.perf_counter() - start) * 1000,
                note=f"{type(exc).__name__}: {exc}",
                level=logging.ERROR,
            )
            raise EngineUnavailable("Search engine unavailable", details=str(exc)) from exc
        return docs, (time.perf_counter() - start) * 1000

    async def dispatch(self, descriptor: SearchDescriptor, skip: int, limit: int) -> Tuple[int, List[Movie]]:
        """Count all matches and fetch one ranked page in a single round trip."""
        pipeline = search_pipeline(descriptor, skip=skip, limit=limit)
        result, duration_ms = await self._aggregate(pipeline)
        total, docs = parse_facet(result)
        movies = [Movie(**movie_from_document(doc)) for doc in docs]
        log_stage(ENGINE_DISPATCHED, movies, duration_ms=duration_ms, total=total, skip=skip)
        return total, movies

    async def dispatch_autocomplete(self, descriptor: AutocompleteProbe) -> List[Suggestion]:
        docs, duration_ms = await self._aggregate(autocomplete_pipeline(descriptor))
        suggestions = []
        for doc in docs:
            root = sanitize_document(doc)
            suggestions.append(
                Suggestion(
                    id=str(root.get("_id", "")),
                    title=root.get("title") or "",
                    score=float(root.get("score", 0.0) or 0.0),
                )
            )
        log_stage(ENGINE_DISPATCHED, suggestions, duration_ms=duration_ms, total=len(suggestions))
        return suggestions


__all__ = ["parse_facet", "SearchDispatcher"]
