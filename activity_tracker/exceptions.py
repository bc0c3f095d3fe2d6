"""Custom exceptions for the activity tracker."""


class ActivityTrackerError(Exception):
    """Base class for activity tracker errors."""

    pass


class SuggestionSearchError(ActivityTrackerError):
    """Raised when the suggestion search collaborator fails.

    Covers network errors, HTTP error statuses and malformed response bodies.
    Request cancellation is never reported with this exception.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ActivityPersistenceError(ActivityTrackerError):
    """Raised when an activity could not be written to the persistence API."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
