"""Focus rating prompt shared by every view that finishes an activity.

Construct one FocusRatingPrompt per application and hand the same instance
to each consumer; there is no module-level state.
"""

import logging
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

ActivityUpdater = Callable[[str, dict[str, Any]], Awaitable[Any]]
PromptCallback = Callable[["FocusRatingPrompt"], None]

MIN_FOCUS_RATING = 1
MAX_FOCUS_RATING = 5


class FocusRatingPrompt:
    """State of the "how focused were you?" prompt."""

    def __init__(self, update_activity: ActivityUpdater):
        """Initialize the prompt.

        Args:
            update_activity: Coroutine function persisting ``(activity_id, changes)``
        """
        self._update_activity = update_activity
        self._show_modal = False
        self._pending_activity: dict[str, Any] | None = None
        self._subscribers: list[PromptCallback] = []

    @property
    def show_modal(self) -> bool:
        return self._show_modal

    @property
    def pending_activity(self) -> dict[str, Any] | None:
        return self._pending_activity

    def subscribe(self, callback: PromptCallback) -> Callable[[], None]:
        """Register a callback invoked after every state change."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            callback(self)

    def prompt_for_rating(self, activity: dict[str, Any]) -> None:
        """Ask for a rating of a just-finished activity."""
        self._pending_activity = activity
        self._show_modal = True
        self._notify()

    async def save_rating(self, rating: int) -> bool:
        """Persist a rating for the pending activity and close the prompt.

        Returns:
            True if the rating was saved; False if nothing was pending, the
            rating is out of range, or the update failed (the prompt stays open)
        """
        if self._pending_activity is None:
            return False
        if not MIN_FOCUS_RATING <= rating <= MAX_FOCUS_RATING:
            logger.warning(f"Ignoring focus rating out of range: {rating}")
            return False

        activity_id = self._pending_activity.get("id")
        try:
            await self._update_activity(activity_id, {"focusRating": rating})
        except Exception as e:
            logger.error(f"Failed to save focus rating for activity {activity_id}: {e}")
            return False

        logger.info(f"Saved focus rating {rating} for activity {activity_id}")
        self.close_modal()
        return True

    def skip_rating(self) -> None:
        """Close the prompt without saving."""
        self.close_modal()

    def close_modal(self) -> None:
        self._show_modal = False
        self._pending_activity = None
        self._notify()
