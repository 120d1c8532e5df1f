from __future__ import annotations

import logging

import pytest

from web_search_mcp.logs import EventLogger


def test_render_replaces_query_with_length_and_redacts_urls() -> None:
    events = EventLogger()

    rendered = events.render(
        {
            "query": "my secret",
            "url": "https://duckduckgo.com/html/?q=my+secret&kl=us-en",
            "attempt": 2,
        }
    )

    assert rendered == (
        "attempt=2 query_length=9 "
        "url=https://duckduckgo.com/html/?q=[REDACTED]&kl=us-en"
    )


def test_render_keeps_query_when_sanitizing_is_off() -> None:
    events = EventLogger(sanitize=False)

    assert events.render({"query": "open  data", "error": ""}) == "error=- query=open data"


def test_emit_writes_event_name(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="web_search_mcp.test")
    events = EventLogger(logging.getLogger("web_search_mcp.test"))

    events.info("search_start", provider="duckduckgo", query="abc")
    events.debug("hidden_event")

    assert "event=search_start provider=duckduckgo query_length=3" in caplog.text
    assert "hidden_event" not in caplog.text


def test_child_inherits_sanitize_flag() -> None:
    child = EventLogger(sanitize=False).child("web_search_mcp.child")

    assert child.sanitize is False
