"""Pagination and envelope tests for the result shaper."""

from __future__ import annotations

import math

import pytest

from movie_search.models import Movie, Suggestion
from movie_search.shaper import MAX_WINDOW, normalize_window, page_count, shape, shape_autocomplete


def _movie(title: str, score: float) -> Movie:
    return Movie(id=title.lower().replace(" ", "-"), title=title, score=score)


STAR_WARS = _movie("Star Wars", 7.25)
STAR_TREK = _movie("Star Trek", 5.5)


@pytest.mark.parametrize("requested", [0, -1, -50, None])
def test_page_below_one_normalizes_to_first_page(requested) -> None:
    page, _, skip = normalize_window(requested, 30)

    assert page == 1
    assert skip == 0


@pytest.mark.parametrize("requested", [0, -3, None])
def test_limit_below_one_normalizes_to_one(requested) -> None:
    result = shape(5, [STAR_WARS], 1, requested)

    assert normalize_window(1, requested)[1] == 1
    assert result.pagination.pages == 5


def test_skip_follows_normalized_window() -> None:
    assert normalize_window(3, 30) == (3, 30, 60)


@pytest.mark.parametrize("page, limit", [(10**19, 30), (10**19, 1), (2, 10**30), (10**40, 10**40)])
def test_window_stays_within_int64(page, limit) -> None:
    page_number, size, skip = normalize_window(page, limit)

    assert 1 <= size <= MAX_WINDOW
    assert 0 <= skip <= MAX_WINDOW
    assert skip == (page_number - 1) * size


def test_huge_page_is_an_empty_page_not_an_error() -> None:
    result = shape(2, [], 10**19, 30)

    assert result.best_match is None
    assert result.movies == []
    assert result.pagination.pages == 1


@pytest.mark.parametrize("total", [0, 1, 29, 30, 31, 59, 60, 61, 1000])
@pytest.mark.parametrize("limit", [1, 7, 30])
def test_pages_is_ceiling_of_total_over_limit(total, limit) -> None:
    assert page_count(total, limit) == math.ceil(total / limit)
    assert shape(total, [], 1, limit).pagination.pages == math.ceil(total / limit)


def test_best_match_is_split_from_first_page() -> None:
    third = _movie("Star Trek II", 4.0)

    result = shape(3, [STAR_WARS, STAR_TREK, third], 1, 30)

    assert result.best_match == STAR_WARS
    assert result.movies == [STAR_TREK, third]


def test_star_example_envelope() -> None:
    result = shape(2, [STAR_WARS, STAR_TREK], 1, 30)

    assert result.best_match.title == "Star Wars"
    assert [m.title for m in result.movies] == ["Star Trek"]
    assert result.pagination.model_dump() == {"total": 2, "page": 1, "pages": 1}


def test_later_pages_do_not_claim_a_best_match() -> None:
    result = shape(40, [STAR_TREK], 2, 30)

    assert result.best_match is None
    assert result.movies == [STAR_TREK]
    assert result.pagination.page == 2


def test_best_match_distinction_can_be_disabled() -> None:
    result = shape(2, [STAR_WARS, STAR_TREK], 1, 30, distinguish_best_match=False)

    assert result.best_match is None
    assert result.movies == [STAR_WARS, STAR_TREK]


def test_empty_page_yields_empty_envelope() -> None:
    result = shape(0, [], -1, 0)

    assert result.best_match is None
    assert result.movies == []
    assert result.pagination.model_dump() == {"total": 0, "page": 1, "pages": 0}


def test_envelope_serializes_best_match_in_camel_case() -> None:
    payload = shape(1, [STAR_WARS], 1, 30).model_dump(by_alias=True)

    assert set(payload) == {"bestMatch", "movies", "pagination"}
    assert payload["bestMatch"]["title"] == "Star Wars"


def test_autocomplete_truncates_to_ten_in_engine_order() -> None:
    candidates = [Suggestion(id=str(i), title=f"Star {i}", score=30.0 - i) for i in range(30)]

    result = shape_autocomplete(candidates)

    assert len(result.suggestions) == 10
    scores = [s.score for s in result.suggestions]
    assert scores == sorted(scores, reverse=True)
    assert result.suggestions[0].title == "Star 0"


def test_autocomplete_with_few_candidates_keeps_all() -> None:
    candidates = [Suggestion(id="1", title="Star Wars", score=3.0), Suggestion(id="2", title="Star Trek", score=2.0)]

    assert shape_autocomplete(candidates).suggestions == candidates
