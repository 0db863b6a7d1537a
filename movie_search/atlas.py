"""Compile search descriptors into MongoDB Atlas aggregation pipelines."""
from __future__ import annotations

from typing import Any, Dict, List, Tuple

from .descriptors import (
    AutocompleteClause,
    AutocompleteProbe,
    EqualsClause,
    FuzzyTolerance,
    RangeClause,
    SearchDescriptor,
    StandardSearch,
    TextClause,
    TitleWeightedSearch,
)

MOVIE_PROJECTION: Dict[str, Any] = {
    "_id": 1,
    "title": 1,
    "year": 1,
    "plot": 1,
    "poster": 1,
    "runtime": 1,
    "imdb.rating": 1,
    "genres": 1,
    "score": {"$meta": "searchScore"},
}

SUGGESTION_PROJECTION: Dict[str, Any] = {
    "_id": 1,
    "title": 1,
    "score": {"$meta": "searchScore"},
}


def _fuzzy(fuzzy: FuzzyTolerance) -> Dict[str, int]:
    return {"maxEdits": fuzzy.max_edits, "prefixLength": fuzzy.prefix_length}


def _text(clause: TextClause) -> Dict[str, Any]:
    path: Any = list(clause.paths) if len(clause.paths) > 1 else clause.paths[0]
    body: Dict[str, Any] = {"query": clause.query, "path": path}
    if clause.fuzzy is not None:
        body["fuzzy"] = _fuzzy(clause.fuzzy)
    if clause.boost is not None:
        body["score"] = {"boost": {"value": clause.boost}}
    return {"text": body}


def _range(clause: RangeClause) -> Dict[str, Any]:
    body: Dict[str, Any] = {"path": clause.path}
    if clause.gte is not None:
        body["gte"] = clause.gte
    if clause.lte is not None:
        body["lte"] = clause.lte
    return {"range": body}


def _autocomplete(clause: AutocompleteClause) -> Dict[str, Any]:
    return {
        "autocomplete": {
            "query": clause.query,
            "path": clause.path,
            "fuzzy": _fuzzy(clause.fuzzy),
        }
    }


def _match(clauses: Tuple[EqualsClause, ...]) -> Dict[str, Any]:
    return {"$match": {clause.path: clause.value for clause in clauses}}


def search_stage(descriptor: SearchDescriptor) -> Dict[str, Any]:
    """Return the ``$search`` stage for ``descriptor``."""
    if isinstance(descriptor, StandardSearch):
        compound: Dict[str, Any] = {"must": [_text(c) for c in descriptor.must]}
        if descriptor.filters:
            compound["filter"] = [_range(c) for c in descriptor.filters]
        return {"$search": {"index": descriptor.index, "compound": compound}}
    if isinstance(descriptor, TitleWeightedSearch):
        return {
            "$search": {
                "index": descriptor.index,
                "compound": {
                    "should": [_text(c) for c in descriptor.should],
                    "minimumShouldMatch": descriptor.minimum_should_match,
                },
            }
        }
    if isinstance(descriptor, AutocompleteProbe):
        return {"$search": {"index": descriptor.index, **_autocomplete(descriptor.clause)}}
    raise TypeError(f"unsupported descriptor: {type(descriptor).__name__}")


def search_pipeline(descriptor: SearchDescriptor, skip: int, limit: int) -> List[Dict[str, Any]]:
    """Pipeline counting every match and returning one page, both in a single ``$facet``."""
    if isinstance(descriptor, AutocompleteProbe):
        raise TypeError("autocomplete probes compile with autocomplete_pipeline()")

    pipeline: List[Dict[str, Any]] = [search_stage(descriptor)]
    if isinstance(descriptor, StandardSearch) and descriptor.post_match:
        pipeline.append(_match(descriptor.post_match))
    pipeline.append(
        {
            "$facet": {
                "metadata": [{"$count": "total"}],
                "data": [
                    {"$skip": skip},
                    {"$limit": limit},
                    {"$project": dict(MOVIE_PROJECTION)},
                ],
            }
        }
    )
    return pipeline


def autocomplete_pipeline(descriptor: AutocompleteProbe) -> List[Dict[str, Any]]:
    return [
        search_stage(descriptor),
        {"$limit": descriptor.candidate_limit},
        {"$project": dict(SUGGESTION_PROJECTION)},
    ]


__all__ = [
    "MOVIE_PROJECTION",
    "SUGGESTION_PROJECTION",
    "search_stage",
    "search_pipeline",
    "autocomplete_pipeline",
]
