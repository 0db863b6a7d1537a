"""Tests for structured stage logging."""

from __future__ import annotations

import json
import logging

from movie_search.logging_utils import (
    RESULT_SHAPED,
    clear_request_context,
    get_request_context,
    log_stage,
    set_request_context,
)
from movie_search.models import Movie


def test_log_stage_carries_request_context(caplog) -> None:
    caplog.set_level(logging.INFO, logger="uvicorn.error")
    set_request_context("req-1", "standard", "star", page=1, limit=30)
    try:
        entry = log_stage(RESULT_SHAPED, [Movie(id="a", title="Star Wars", score=2.0), {"_id": "b", "score": 1}], total=2)
    finally:
        clear_request_context()

    assert entry["request_id"] == "req-1"
    assert entry["mode"] == "standard"
    assert entry["top_ids"] == ["a", "b"]
    assert entry["top_scores"] == [2.0, 1.0]
    assert entry["total"] == 2
    assert entry["timestamp"].endswith("Z")
    assert json.loads(caplog.records[-1].getMessage()) == entry
    assert get_request_context() == {}


def test_log_stage_redacts_contact_details() -> None:
    set_request_context("req-2", "standard", "movies for jane@example.com")
    try:
        entry = log_stage(RESULT_SHAPED)
    finally:
        clear_request_context()

    assert entry["redacted"] is True
    assert entry["query"].startswith("[REDACTED]")


def test_log_stage_without_context_still_has_request_id() -> None:
    entry = log_stage(RESULT_SHAPED, note="standalone")

    assert entry["request_id"]
    assert entry["note"] == "standalone"
    assert entry["count"] == 0
