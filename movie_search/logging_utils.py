"""Logging helpers and request context for structured stage instrumentation."""
from __future__ import annotations

import contextvars
import datetime as _dt
import json
import logging
import re
import uuid
from typing import Any, Dict, Iterable, List, Optional, Tuple

_logger = logging.getLogger("uvicorn.error")

_request_context: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar("request_context", default={})

_EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
_PHONE_RE = re.compile(r"\b(?:\+?\d{1,3}[ -]?)?(?:\(\d{3}\)|\d{3})[ -]?\d{3}[ -]?\d{4}\b")

REQUEST_RECEIVED = "request_received"
DESCRIPTOR_BUILT = "descriptor_built"
ENGINE_DISPATCHED = "engine_dispatched"
RESULT_SHAPED = "result_shaped"
ENGINE_FAILED = "engine_failed"
VALIDATION_FAILED = "validation_failed"


def new_request_id() -> str:
    return str(uuid.uuid4())


def set_request_context(request_id: str, mode: str, query: str, page: Optional[int] = None, limit: Optional[int] = None) -> None:
    _request_context.set({"request_id": request_id, "mode": mode, "query": query, "page": page, "limit": limit})


def clear_request_context() -> None:
    _request_context.set({})


def get_request_context() -> Dict[str, Any]:
    return _request_context.get() or {}


def _redact_query(query: str) -> Tuple[str, bool]:
    if not query:
        return "", False
    if _EMAIL_RE.search(query) or _PHONE_RE.search(query):
        truncated = (query[:50] + "…") if len(query) > 50 else query
        return f"[REDACTED] {truncated}", True
    if len(query) > 200:
        return query[:200] + "…", False
    return query, False


def _field(record: Any, name: str) -> Any:
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def _extract_top_info(records: Iterable[Any], max_items: int = 10) -> Tuple[List[str], List[Optional[float]]]:
    ids: List[str] = []
    scores: List[Optional[float]] = []
    for record in records:
        if len(ids) >= max_items:
            break
        ids.append(str(_field(record, "id") or _field(record, "_id") or ""))
        score = _field(record, "score")
        scores.append(float(score) if isinstance(score, (int, float)) else None)
    return ids, scores


def log_stage(
    stage: str,
    records: Iterable[Any] = (),
    *,
    duration_ms: float | None = None,
    note: str | None = None,
    level: int = logging.INFO,
    **fields: Any,
) -> Dict[str, Any]:
    """Emit one JSON log line for ``stage`` and return the entry that was logged."""
    ctx = get_request_context()
    request_id = ctx.get("request_id") or new_request_id()

    display_query, redacted = _redact_query(ctx.get("query", ""))
    records_list = list(records)
    top_ids, top_scores = _extract_top_info(records_list)

    entry: Dict[str, Any] = {
        "timestamp": _dt.datetime.now(_dt.timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        "request_id": request_id,
        "stage": stage,
        "mode": ctx.get("mode"),
        "query": display_query,
        "page": ctx.get("page"),
        "limit": ctx.get("limit"),
        "count": len(records_list),
        "top_ids": top_ids,
        "top_scores": top_scores,
        "duration_ms": round(duration_ms, 2) if duration_ms is not None else None,
    }
    entry.update(fields)
    if note:
        entry["note"] = note
    if redacted:
        entry["redacted"] = True

    _logger.log(level, "%s", json.dumps(entry, default=str))
    return entry


__all__ = [
    "REQUEST_RECEIVED",
    "DESCRIPTOR_BUILT",
    "ENGINE_DISPATCHED",
    "RESULT_SHAPED",
    "ENGINE_FAILED",
    "VALIDATION_FAILED",
    "new_request_id",
    "set_request_context",
    "clear_request_context",
    "get_request_context",
    "log_stage",
]
