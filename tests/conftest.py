"""Test fixtures for movie_search."""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")
os.environ.setdefault("ENVIRONMENT", "production")

from movie_search.main import app  # noqa: E402

STAR_WARS_ID = ObjectId("573a1397f29313caabce68f6")
STAR_TREK_ID = ObjectId("573a1396f29313caabce5a13")


def movie_doc(_id: ObjectId, title: str, score: float, **extra: Any) -> Dict[str, Any]:
    doc = {
        "_id": _id,
        "title": title,
        "year": 1977,
        "plot": "A long time ago in a galaxy far, far away...",
        "poster": None,
        "runtime": 121,
        "imdb": {"rating": 8.6},
        "genres": ["Action", "Adventure", "Fantasy"],
        "score": score,
    }
    doc.update(extra)
    return doc


STAR_WARS = movie_doc(STAR_WARS_ID, "Star Wars", 7.25)
STAR_TREK = movie_doc(
    STAR_TREK_ID,
    "Star Trek",
    5.5,
    year=1966,
    plot="Space, the final frontier...",
    runtime=50,
    imdb={"rating": 8.3},
    genres=["Action", "Adventure", "Sci-Fi"],
)


def facet(docs: List[Dict[str, Any]], total: Optional[int] = None) -> List[Dict[str, Any]]:
    """Shape ``docs`` the way the ``$facet`` stage returns them."""
    total = len(docs) if total is None else total
    return [{"metadata": [{"total": total}] if total else [], "data": docs}]


class FakeCursor:
    """Async iterator standing in for Motor's command cursor."""

    def __init__(self, docs: List[Dict[str, Any]], error: Optional[BaseException] = None) -> None:
        self._docs = list(docs)
        self._error = error

    def __aiter__(self) -> "FakeCursor":
        return self

    async def __anext__(self) -> Dict[str, Any]:
        if self._error is not None:
            raise self._error
        if not self._docs:
            raise StopAsyncIteration
        return self._docs.pop(0)


class FakeCollection:
    def __init__(self) -> None:
        self.results: List[Dict[str, Any]] = []
        self.error: Optional[BaseException] = None
        self.pipelines: List[List[Dict[str, Any]]] = []
        self.documents: Dict[Any, Dict[str, Any]] = {}
        self.search_indexes: List[Dict[str, Any]] = []
        self.created_indexes: List[Any] = []

    def aggregate(self, pipeline: List[Dict[str, Any]]) -> FakeCursor:
        self.pipelines.append(pipeline)
        return FakeCursor(self.results, self.error)

    async def find_one(self, query: Dict[str, Any], projection: Optional[Dict[str, Any]] = None):
        if self.error is not None:
            raise self.error
        return self.documents.get(query["_id"])

    async def estimated_document_count(self) -> int:
        if self.error is not None:
            raise self.error
        return len(self.documents)

    def list_search_indexes(self) -> FakeCursor:
        return FakeCursor(self.search_indexes)

    async def create_search_index(self, model: Any) -> str:
        self.created_indexes.append(model)
        return model.document["name"]


class FakeEngine:
    """Substitute engine counting scoped acquisitions and releases."""

    def __init__(self) -> None:
        self.collection = FakeCollection()
        self.acquired = 0
        self.released = 0

    @asynccontextmanager
    async def acquire(self):
        self.acquired += 1
        try:
            yield self.collection
        finally:
            self.released += 1


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def client(engine: FakeEngine):
    app.state.engine = engine
    with TestClient(app) as test_client:
        yield test_client
    app.state.engine = None
