"""Tests for the Atlas Search index definitions and provisioning."""

from __future__ import annotations

import asyncio

from movie_search.indexes import create_indexes, index_definitions


def test_three_indexes_with_title_ngrams() -> None:
    definitions = {index["name"]: index["definition"]["mappings"]["fields"] for index in index_definitions()}

    assert set(definitions) == {"movies", "movies_title_weight", "movies_autocomplete"}
    for fields in definitions.values():
        assert fields["title"] == {"type": "autocomplete", "minGrams": 2, "maxGrams": 20}
    assert set(definitions["movies"]) == {"title", "plot", "genres", "year", "runtime", "imdb"}
    assert set(definitions["movies_title_weight"]) == {"title", "plot"}
    assert set(definitions["movies_autocomplete"]) == {"title"}


def test_create_indexes_skips_existing(engine) -> None:
    engine.collection.search_indexes = [{"name": "movies"}]

    created = asyncio.run(create_indexes(engine))

    assert created == ["movies_title_weight", "movies_autocomplete"]
    assert [model.document["name"] for model in engine.collection.created_indexes] == created
    assert engine.released == 1
