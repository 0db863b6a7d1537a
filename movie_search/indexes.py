"""Atlas Search index definitions for the ``movies`` collection and a provisioning entry point.

Run ``python -m movie_search.indexes`` once per cluster. The request path
assumes these indexes exist and never creates or checks them.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List

from pymongo.operations import SearchIndexModel

from .config import Settings, settings
from .db import MongoEngine

logger = logging.getLogger("uvicorn.error")

TITLE_AUTOCOMPLETE: Dict[str, Any] = {"type": "autocomplete", "minGrams": 2, "maxGrams": 20}


def index_definitions(config: Settings = settings) -> List[Dict[str, Any]]:
    return [
        {
            "name": config.search_index_name,
            "definition": {
                "mappings": {
                    "dynamic": False,
                    "fields": {
                        "title": dict(TITLE_AUTOCOMPLETE),
                        "plot": {"type": "string"},
                        "genres": {"type": "string"},
                        "year": {"type": "number"},
                        "runtime": {"type": "number"},
                        "imdb": {"type": "document", "fields": {"rating": {"type": "number"}}},
                    },
                }
            },
        },
        {
            "name": config.title_weight_index_name,
            "definition": {
                "mappings": {
                    "dynamic": False,
                    "fields": {
                        "title": dict(TITLE_AUTOCOMPLETE),
                        "plot": {"type": "string"},
                    },
                }
            },
        },
        {
            "name": config.autocomplete_index_name,
            "definition": {
                "mappings": {
                    "dynamic": False,
                    "fields": {"title": dict(TITLE_AUTOCOMPLETE)},
                }
            },
        },
    ]


async def create_indexes(engine: Any, config: Settings = settings) -> List[str]:
    """Create whichever search indexes are missing and return their names."""
    created: List[str] = []
    async with engine.acquire() as coll:
        existing = {index["name"] async for index in coll.list_search_indexes()}
        for index in index_definitions(config):
            if index["name"] in existing:
                logger.info("Search index %s already exists", index["name"])
                continue
            await coll.create_search_index(SearchIndexModel(definition=index["definition"], name=index["name"]))
            logger.info("Created search index %s", index["name"])
            created.append(index["name"])
    return created


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(create_indexes(MongoEngine(settings)))


if __name__ == "__main__":
    main()
