import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo.errors import PyMongoError

from .config import Settings, settings
from .errors import EngineUnavailable

# Failures of the driver or the network; anything else is a bug and propagates as-is.
ENGINE_ERRORS = (PyMongoError, OSError, asyncio.TimeoutError)


class MongoEngine:
    """Hands out the ``movies`` collection on a client opened for a single call.

    Nothing is pooled across calls: ``acquire`` creates a Motor client, yields
    the collection and closes the client on every exit path.
    """

    def __init__(self, config: Optional[Settings] = None) -> None:
        self.config = config or settings

    def _client(self) -> AsyncIOMotorClient:
        return AsyncIOMotorClient(
            str(self.config.mongodb_uri),
            serverSelectionTimeoutMS=self.config.mongo_server_selection_timeout_ms,
            tz_aware=True,
        )

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[AsyncIOMotorCollection]:
        client = self._client()
        try:
            yield client[self.config.db_name][self.config.collection_name]
        finally:
            client.close()


class MovieStore:
    """Record-by-id and bulk count over the catalog, outside the search path."""

    def __init__(self, engine: Any) -> None:
        self.engine = engine

    async def get_by_id(self, movie_id: str) -> Optional[Dict[str, Any]]:
        try:
            key: Any = ObjectId(movie_id)
        except (InvalidId, TypeError):
            key = movie_id
        try:
            async with self.engine.acquire() as coll:
                return await coll.find_one({"_id": key}, projection={"plot_embedding": 0})
        except ENGINE_ERRORS as exc:
            raise EngineUnavailable("Error fetching movie", details=str(exc)) from exc

    async def count(self) -> int:
        try:
            async with self.engine.acquire() as coll:
                return await coll.estimated_document_count()
        except ENGINE_ERRORS as exc:
            raise EngineUnavailable("MongoDB unreachable", details=str(exc)) from exc
