"""Business logic services."""

from activity_tracker.services.autocomplete_service import AutoCompleteService
from activity_tracker.services.focus_rating import FocusRatingPrompt
from activity_tracker.services.suggestion_ranking import LocalSuggestionSource, SuggestionRanker

__all__ = [
    "AutoCompleteService",
    "FocusRatingPrompt",
    "LocalSuggestionSource",
    "SuggestionRanker",
]
