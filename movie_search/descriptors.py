"""Query descriptor builder.

Turns an already-parsed request into an engine-agnostic search descriptor.
Three variants exist:

* ``StandardSearch``: fuzzy text match over title and plot plus optional
  range filters and a post-match genre equality clause.
* ``TitleWeightedSearch``: two "should" text matches, the title one boosted.
* ``AutocompleteProbe``: n-gram prefix match over the title only.

Nothing in this module performs I/O. The only failure it raises is
``ValidationFailure`` for a title weight that is not a finite number.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple, Union

from .config import settings
from .errors import ValidationFailure
from .models import Filters
from .normalize import normalize_query_text

ALL_GENRES = "All"

# Plain decimal or exponent notation, as a JSON number literal would read.
_NUMBER_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass(frozen=True)
class FuzzyTolerance:
    max_edits: int = 1
    prefix_length: int = 2


DEFAULT_FUZZY = FuzzyTolerance()


@dataclass(frozen=True)
class TextClause:
    query: str
    paths: Tuple[str, ...]
    fuzzy: Optional[FuzzyTolerance] = None
    boost: Optional[float] = None


@dataclass(frozen=True)
class RangeClause:
    path: str
    gte: Optional[float] = None
    lte: Optional[float] = None


@dataclass(frozen=True)
class EqualsClause:
    path: str
    value: Any


@dataclass(frozen=True)
class AutocompleteClause:
    query: str
    path: str
    fuzzy: FuzzyTolerance = DEFAULT_FUZZY


@dataclass(frozen=True)
class StandardSearch:
    index: str
    must: Tuple[TextClause, ...]
    filters: Tuple[RangeClause, ...] = ()
    post_match: Tuple[EqualsClause, ...] = ()


@dataclass(frozen=True)
class TitleWeightedSearch:
    index: str
    should: Tuple[TextClause, ...]
    minimum_should_match: int = 1

    @property
    def boost(self) -> Optional[float]:
        """Boost carried by the title clause."""
        return self.should[0].boost


@dataclass(frozen=True)
class AutocompleteProbe:
    index: str
    clause: AutocompleteClause
    candidate_limit: int


SearchDescriptor = Union[StandardSearch, TitleWeightedSearch, AutocompleteProbe]


def _runtime_clause(filters: Filters) -> Optional[RangeClause]:
    if filters.max_runtime_minutes is None:
        return None
    return RangeClause(path="runtime", lte=filters.max_runtime_minutes)


def _rating_clause(filters: Filters) -> Optional[RangeClause]:
    if filters.min_rating is None:
        return None
    return RangeClause(path="imdb.rating", gte=filters.min_rating)


def _year_clause(filters: Filters) -> Optional[RangeClause]:
    year_range = filters.year_range
    if year_range is None:
        return None
    start, end = year_range
    return RangeClause(path="year", gte=start, lte=end)


# Evaluated in order; each constructor contributes at most one clause.
FILTER_CLAUSES: Tuple[Callable[[Filters], Optional[RangeClause]], ...] = (
    _runtime_clause,
    _rating_clause,
    _year_clause,
)


def filter_clauses(filters: Optional[Filters]) -> Tuple[RangeClause, ...]:
    if filters is None:
        return ()
    clauses = (build_clause(filters) for build_clause in FILTER_CLAUSES)
    return tuple(clause for clause in clauses if clause is not None)


def genre_clause(filters: Optional[Filters]) -> Tuple[EqualsClause, ...]:
    if filters is None or not filters.genre or filters.genre == ALL_GENRES:
        return ()
    return (EqualsClause(path="genres", value=filters.genre),)


def validate_title_weight(value: Any, default: Optional[float] = None) -> float:
    """Return ``value`` as a finite float, or raise ``ValidationFailure``.

    ``None`` selects ``default``, or the configured default weight when that is
    not given. Strings must spell a plain decimal number the way a JSON client
    would send one from a text input; booleans are not numbers here.
    """
    if value is None:
        return float(settings.default_title_weight if default is None else default)
    if isinstance(value, bool):
        raise ValidationFailure("Title weight must be a number")
    if isinstance(value, str):
        value = value.strip()
        if not _NUMBER_RE.fullmatch(value):
            raise ValidationFailure("Title weight must be a number")
    elif not isinstance(value, (int, float)):
        raise ValidationFailure("Title weight must be a number")
    try:
        weight = float(value)
    except (OverflowError, ValueError):
        raise ValidationFailure("Title weight must be a number") from None
    if not math.isfinite(weight):
        raise ValidationFailure("Title weight must be a number")
    return weight


def build_standard(query: str, filters: Optional[Filters] = None) -> StandardSearch:
    text = TextClause(query=normalize_query_text(query), paths=("title", "plot"), fuzzy=DEFAULT_FUZZY)
    return StandardSearch(
        index=settings.search_index_name,
        must=(text,),
        filters=filter_clauses(filters),
        post_match=genre_clause(filters),
    )


def build_title_weighted(query: str, title_weight: Any = None) -> TitleWeightedSearch:
    weight = validate_title_weight(title_weight)
    text = normalize_query_text(query)
    return TitleWeightedSearch(
        index=settings.title_weight_index_name,
        should=(
            TextClause(query=text, paths=("title",), boost=weight),
            TextClause(query=text, paths=("plot",)),
        ),
    )


def build_autocomplete(prefix: str) -> AutocompleteProbe:
    return AutocompleteProbe(
        index=settings.autocomplete_index_name,
        clause=AutocompleteClause(query=normalize_query_text(prefix), path="title"),
        candidate_limit=settings.autocomplete_candidates,
    )


STANDARD = "standard"
TITLE_WEIGHTED = "title_weighted"


def build(
    query: str,
    mode: str = STANDARD,
    *,
    filters: Optional[Filters] = None,
    title_weight: Any = None,
) -> SearchDescriptor:
    """Build the descriptor for ``mode``; filters are ignored by the title-weighted mode."""
    if mode == STANDARD:
        return build_standard(query, filters)
    if mode == TITLE_WEIGHTED:
        return build_title_weighted(query, title_weight)
    raise ValueError(f"unknown search mode: {mode!r}")


def query_text(descriptor: SearchDescriptor) -> str:
    if isinstance(descriptor, AutocompleteProbe):
        return descriptor.clause.query
    if isinstance(descriptor, StandardSearch):
        return descriptor.must[0].query
    return descriptor.should[0].query


__all__ = [
    "ALL_GENRES",
    "DEFAULT_FUZZY",
    "FuzzyTolerance",
    "TextClause",
    "RangeClause",
    "EqualsClause",
    "AutocompleteClause",
    "StandardSearch",
    "TitleWeightedSearch",
    "AutocompleteProbe",
    "SearchDescriptor",
    "FILTER_CLAUSES",
    "filter_clauses",
    "genre_clause",
    "validate_title_weight",
    "build_standard",
    "build_title_weighted",
    "build_autocomplete",
    "STANDARD",
    "TITLE_WEIGHTED",
    "build",
    "query_text",
]
