"""Pytest configuration and fixtures."""

import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from activity_tracker.integrations.suggestion_client import SuggestionSource
from activity_tracker.schemas import ActivityRecord, Suggestion
from activity_tracker.utils.config import AutoCompleteConfig, Config


class FakeSuggestionSource(SuggestionSource):
    """Scriptable suggestion source that records every query it receives.

    Per-query delays, responses and errors can be configured. With
    ``ignore_cancel`` set, a cancelled request keeps running and still
    returns its result, like a backend that cannot abort.
    """

    def __init__(self, results: list[Suggestion] | None = None):
        self.results = results or []
        self.responses: dict[str, list] = {}
        self.delays: dict[str, float] = {}
        self.errors: dict[str, Exception] = {}
        self.calls: list[str] = []
        self.limits: list[int] = []
        self.cancelled: list[str] = []
        self.ignore_cancel = False

    async def search(self, query: str, limit: int = 10) -> list:
        self.calls.append(query)
        self.limits.append(limit)

        delay = self.delays.get(query, 0)
        if delay:
            try:
                await asyncio.sleep(delay)
            except asyncio.CancelledError:
                self.cancelled.append(query)
                if not self.ignore_cancel:
                    raise
                await asyncio.sleep(delay)

        if query in self.errors:
            raise self.errors[query]
        return self.responses.get(query, self.results)


def make_suggestion(
    suggestion_id: str,
    text: str | None = None,
    suggestion_type: str = "activity",
    frequency: int = 1,
) -> Suggestion:
    """Build a suggestion with sensible defaults."""
    return Suggestion(
        id=suggestion_id,
        text=text or suggestion_id,
        type=suggestion_type,
        frequency=frequency,
    )


@pytest.fixture
def test_config():
    """Create a test configuration."""
    return Config(
        api={"base_url": "http://tracker.test", "timeout_seconds": 5, "max_retries": 0},
        autocomplete={"debounce_ms": 50, "min_query_length": 0, "max_suggestions": 10},
    )


@pytest.fixture
def fast_config():
    """Autocomplete settings with no debounce delay."""
    return AutoCompleteConfig(debounce_ms=0, min_query_length=0, max_suggestions=10)


@pytest.fixture
def sample_suggestions():
    """Mixed activity and tag suggestions, most frequent first."""
    return [
        make_suggestion("sug-1", "Work on project", "activity", 5),
        make_suggestion("sug-2", "Team meeting", "activity", 3),
        make_suggestion("tag-work", "work", "tag", 8),
        make_suggestion("tag-urgent", "urgent", "tag", 4),
    ]


@pytest.fixture
def fake_source(sample_suggestions):
    """Suggestion source returning the sample suggestions for every query."""
    return FakeSuggestionSource(results=sample_suggestions)


@pytest.fixture
def now():
    """Fixed reference time for ranking tests."""
    return datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def activity_history(now):
    """A few days of logged activities."""
    return [
        ActivityRecord(title="Code review", tags=["work", "review"], start_time=now - timedelta(hours=2)),
        ActivityRecord(title="Code review", tags=["work"], start_time=now - timedelta(days=1)),
        ActivityRecord(title="Team meeting", tags=["work", "meeting"], start_time=now - timedelta(days=2)),
        ActivityRecord(title="Workout", tags=["health"], start_time=now - timedelta(days=3)),
        ActivityRecord(title="Read book", tags=["personal", "reading"], start_time=now - timedelta(days=40)),
    ]


@pytest.fixture
def suggestion_factory():
    """Factory for building suggestions inside tests."""
    return make_suggestion


@pytest.fixture
def source_factory():
    """Factory for building scriptable suggestion sources."""
    return FakeSuggestionSource
