"""Backend integrations."""

from activity_tracker.integrations.suggestion_client import SuggestionClient, SuggestionSource

__all__ = [
    "SuggestionClient",
    "SuggestionSource",
]
