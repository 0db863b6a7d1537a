"""Utilities for normalizing query text and MongoDB movie documents."""
from __future__ import annotations

import datetime as _dt
import re
from typing import Any, Dict, Optional

from bson import ObjectId


def normalize_query_text(text: Optional[str]) -> str:
    """Normalize free-text queries by flattening whitespace and stray bullets."""
    if not text:
        return ""
    cleaned = str(text).replace("\t", " ").replace("•", " ")
    cleaned = re.sub(r"[\r\n]+", " ", cleaned)
    cleaned = re.sub(r"\s+", " ", cleaned)
    return cleaned.strip()


def sanitize_document(obj: Any) -> Any:
    """Recursively convert Mongo-specific types to JSON-safe forms while dropping embeddings."""
    if isinstance(obj, dict):
        out: Dict[str, Any] = {}
        for key, value in obj.items():
            if key.endswith("embedding"):
                continue
            out[key] = sanitize_document(value)
        return out
    if isinstance(obj, list):
        return [sanitize_document(item) for item in obj]
    if isinstance(obj, ObjectId):
        return str(obj)
    if isinstance(obj, _dt.datetime):
        return obj.isoformat()
    if isinstance(obj, (str, int, float, bool)) or obj is None:
        return obj
    return str(obj)


def coerce_int(value: Any) -> Optional[int]:
    """Best-effort integer from catalog fields; sample data stores some years as ``"2007è"``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value == value else None
    match = re.match(r"\s*(-?\d+)", str(value))
    return int(match.group(1)) if match else None


def coerce_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool) or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def year_of(value: Any) -> Optional[int]:
    """Reduce a date-like value (date, datetime, ISO string or bare year) to its calendar year."""
    if value is None or value == "":
        return None
    if isinstance(value, (_dt.date, _dt.datetime)):
        return value.year
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    text = str(value).strip()
    if re.fullmatch(r"-?\d{1,4}", text):
        return int(text)
    try:
        return _dt.date.fromisoformat(text[:10]).year
    except ValueError as exc:
        raise ValueError(f"unrecognized date: {value!r}") from exc


def movie_from_document(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten a projected ``movies`` document into the fields exposed by the API."""
    root = sanitize_document(doc or {})
    imdb = root.get("imdb") if isinstance(root.get("imdb"), dict) else {}
    rating = root.get("imdb.rating", imdb.get("rating"))
    genres = root.get("genres") or []
    if isinstance(genres, str):
        genres = [genres]
    return {
        "id": str(root.get("_id", "")),
        "title": root.get("title") or "",
        "year": coerce_int(root.get("year")),
        "plot": root.get("plot"),
        "poster": root.get("poster"),
        "runtime": coerce_int(root.get("runtime")),
        "rating": coerce_float(rating),
        "genres": [str(g) for g in genres],
        "score": float(root.get("score", 0.0) or 0.0),
    }


__all__ = [
    "normalize_query_text",
    "sanitize_document",
    "coerce_int",
    "coerce_float",
    "year_of",
    "movie_from_document",
]
