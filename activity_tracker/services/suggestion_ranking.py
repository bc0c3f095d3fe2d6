"""Suggestion ranking over recently logged activities."""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

from activity_tracker.integrations.suggestion_client import SuggestionSource
from activity_tracker.schemas import ActivityRecord, Suggestion, SuggestionType

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
MAX_LIMIT = 50
# Only the most recent activities feed suggestions
RECENT_ACTIVITY_WINDOW = 200
RECENCY_DECAY_DAYS = 30
MIN_RECENCY_MULTIPLIER = 0.1

EXACT_MATCH_BOOST = 3.0
PREFIX_MATCH_BOOST = 2.0
TAG_SEARCH_TAG_BOOST = 5.0
ACTIVITY_PREFERENCE_BOOST = 1.1

WHITESPACE_PATTERN = re.compile(r"\s+")


@dataclass
class _Candidate:
    """Aggregated usage of one activity title or tag."""

    id: str
    text: str
    type: SuggestionType
    frequency: int
    last_used: datetime


def _as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class SuggestionRanker:
    """Builds ranked activity and tag suggestions from activity history.

    A query starting with ``#`` is a tag search: the ``#`` is stripped,
    activity titles are skipped and tags are strongly preferred.
    """

    def rank(
        self,
        activities: Iterable[ActivityRecord],
        query: str = "",
        limit: int = DEFAULT_LIMIT,
        now: datetime | None = None,
    ) -> list[Suggestion]:
        """Rank suggestions for a query.

        Args:
            activities: Activity history in any order
            query: Raw search text, possibly empty or ``#``-prefixed
            limit: Maximum results; non-positive means the default, capped at 50
            now: Reference time for recency scoring

        Returns:
            Suggestions ordered by relevance, highest first
        """
        if limit <= 0:
            limit = DEFAULT_LIMIT
        limit = min(limit, MAX_LIMIT)
        now = _as_utc(now or datetime.now(UTC))

        is_tag_search = query.startswith("#")
        search = query[1:] if is_tag_search else query
        needle = search.lower()

        recent = sorted(activities, key=lambda a: _as_utc(a.start_time), reverse=True)
        recent = recent[:RECENT_ACTIVITY_WINDOW]

        activity_candidates: dict[str, _Candidate] = {}
        tag_candidates: dict[str, _Candidate] = {}

        for activity in recent:
            title = activity.title.strip()
            used_at = _as_utc(activity.start_time)

            if not is_tag_search and title and (not needle or needle in title.lower()):
                key = title.lower()
                self._record(
                    activity_candidates,
                    key,
                    f"activity-{WHITESPACE_PATTERN.sub('-', key)}",
                    title,
                    "activity",
                    used_at,
                )

            for tag in activity.tags:
                if tag and (not needle or needle in tag.lower()):
                    self._record(tag_candidates, tag, f"tag-{tag}", tag, "tag", used_at)

        candidates = list(activity_candidates.values()) + list(tag_candidates.values())
        scored = [
            (self.score(candidate, now, needle, is_tag_search), candidate)
            for candidate in candidates
        ]
        scored.sort(key=lambda pair: pair[0], reverse=True)

        logger.debug(
            f"Ranked {len(scored)} candidates for query '{query}' "
            f"({len(activity_candidates)} activities, {len(tag_candidates)} tags)"
        )

        return [
            Suggestion(
                id=candidate.id,
                text=candidate.text,
                type=candidate.type,
                frequency=candidate.frequency,
                last_used=candidate.last_used,
            )
            for _, candidate in scored[:limit]
        ]

    @staticmethod
    def _record(
        candidates: dict[str, _Candidate],
        key: str,
        candidate_id: str,
        text: str,
        suggestion_type: SuggestionType,
        used_at: datetime,
    ) -> None:
        existing = candidates.get(key)
        if existing is None:
            candidates[key] = _Candidate(
                id=candidate_id,
                text=text,
                type=suggestion_type,
                frequency=1,
                last_used=used_at,
            )
            return
        existing.frequency += 1
        if used_at > existing.last_used:
            existing.last_used = used_at

    @staticmethod
    def score(candidate: _Candidate, now: datetime, needle: str, is_tag_search: bool) -> float:
        """Relevance score: frequency decayed by recency, boosted by match quality."""
        days_since_used = (now - candidate.last_used).total_seconds() / 86400
        score = candidate.frequency * max(
            MIN_RECENCY_MULTIPLIER, 1 - days_since_used / RECENCY_DECAY_DAYS
        )

        text = candidate.text.lower()
        if needle and text == needle:
            score *= EXACT_MATCH_BOOST
        if needle and text.startswith(needle):
            score *= PREFIX_MATCH_BOOST

        if is_tag_search:
            if candidate.type == "tag":
                score *= TAG_SEARCH_TAG_BOOST
        elif candidate.type == "activity":
            score *= ACTIVITY_PREFERENCE_BOOST

        return score


class LocalSuggestionSource(SuggestionSource):
    """In-memory suggestion source over a list of activities."""

    def __init__(
        self,
        activities: Iterable[ActivityRecord] = (),
        ranker: SuggestionRanker | None = None,
    ):
        self.activities: list[ActivityRecord] = list(activities)
        self.ranker = ranker or SuggestionRanker()

    def add_activity(self, activity: ActivityRecord) -> None:
        """Record a newly logged activity."""
        self.activities.append(activity)

    async def search(self, query: str, limit: int = DEFAULT_LIMIT) -> list[Suggestion]:
        return self.ranker.rank(self.activities, query=query, limit=limit)
