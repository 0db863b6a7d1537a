"""Unit tests for query and document normalization helpers."""

from __future__ import annotations

import datetime as dt

import pytest
from bson import ObjectId

from movie_search.normalize import coerce_int, movie_from_document, normalize_query_text, sanitize_document, year_of


def test_normalize_query_text_flattens_whitespace() -> None:
    assert normalize_query_text("  star\t\twars\r\n• trek ") == "star wars trek"
    assert normalize_query_text(None) == ""
    assert normalize_query_text("") == ""


def test_sanitize_document_converts_mongo_types_and_drops_embeddings() -> None:
    oid = ObjectId("573a1397f29313caabce68f6")
    released = dt.datetime(1977, 5, 25, tzinfo=dt.timezone.utc)

    clean = sanitize_document({"_id": oid, "released": released, "plot_embedding": [0.1], "cast": [oid]})

    assert clean == {"_id": str(oid), "released": released.isoformat(), "cast": [str(oid)]}


@pytest.mark.parametrize(
    "value, expected",
    [(1999, 1999), ("1999", 1999), ("1999-04-02", 1999), ("2003-12-31T23:00:00.000Z", 2003), (dt.date(1984, 1, 1), 1984), (None, None), ("", None)],
)
def test_year_of_reduces_dates_to_calendar_year(value, expected) -> None:
    assert year_of(value) == expected


def test_year_of_rejects_garbage() -> None:
    with pytest.raises(ValueError):
        year_of("last summer")


def test_coerce_int_handles_dirty_catalog_values() -> None:
    assert coerce_int("2007è") == 2007
    assert coerce_int(121.0) == 121
    assert coerce_int("n/a") is None
    assert coerce_int(True) is None


def test_movie_from_document_flattens_imdb_rating() -> None:
    movie = movie_from_document({"_id": 1, "title": "Jaws", "imdb": {"rating": ""}, "genres": "Thriller", "score": 1.5})

    assert movie["id"] == "1"
    assert movie["rating"] is None
    assert movie["genres"] == ["Thriller"]
    assert movie["score"] == 1.5
    assert movie["year"] is None
