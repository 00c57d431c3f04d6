"""Tests for request context and log processors."""

import pytest

from anonboard.core.context import (
    clear_context,
    get_context,
    get_request_id,
    set_principal,
    set_request_id,
    set_trace_id,
)
from anonboard.core.logging import add_context_processor, filter_sensitive_data
from anonboard.core.redis import view_dedup_key


@pytest.fixture(autouse=True)
def _clean_context():
    clear_context()
    yield
    clear_context()


class TestContext:
    """Tests for contextvars helpers."""

    def test_generates_request_id(self) -> None:
        request_id = set_request_id()
        assert request_id
        assert get_request_id() == request_id

    def test_keeps_supplied_request_id(self) -> None:
        assert set_request_id("req-1") == "req-1"

    def test_get_context_skips_empty(self) -> None:
        assert get_context() == {}

        set_request_id("req-1")
        set_principal("user-a", "owner")
        set_trace_id("trace-9")

        assert get_context() == {
            "request_id": "req-1",
            "user_id": "user-a",
            "user_role": "owner",
            "trace_id": "trace-9",
        }

    def test_clear_context(self) -> None:
        set_request_id("req-1")
        set_principal("user-a")
        clear_context()
        assert get_context() == {}


class TestProcessors:
    """Tests for structlog processors."""

    def test_context_processor_adds_fields(self) -> None:
        set_request_id("req-1")
        event = add_context_processor(None, "info", {"event": "post_created"})
        assert event == {"event": "post_created", "request_id": "req-1"}

    def test_masks_sensitive_values(self) -> None:
        event = filter_sensitive_data(
            None,
            "info",
            {
                "event": "request_started",
                "authorization": "Bearer abcdefgh",
                "headers": {"x_token": "abc"},
                "post_id": "p-1",
            },
        )
        assert event["authorization"].startswith("Be")
        assert event["authorization"].endswith("gh")
        assert "abcdef" not in event["authorization"]
        assert event["headers"] == {"x_token": "***"}
        assert event["post_id"] == "p-1"


def test_view_dedup_key() -> None:
    assert view_dedup_key("p-1", "req-1") == "board:views:p-1:req-1"
