"""Autocomplete service: debounced, cancellable suggestion search.

One AutoCompleteService belongs to one input field. It owns at most one
pending search task, which covers both the debounce delay and the request
itself, so a new keystroke cancels whichever phase is running. A generation
counter guards against results that arrive after a newer search started,
including from sources that ignore cancellation.

All state changes happen on the event loop that drives the service;
subscribers are called synchronously after each change.
"""

import asyncio
import logging
from collections.abc import Iterable
from typing import Callable

from pydantic import ValidationError

from activity_tracker.exceptions import SuggestionSearchError
from activity_tracker.integrations.suggestion_client import SuggestionSource
from activity_tracker.schemas import Suggestion
from activity_tracker.utils.config import AutoCompleteConfig

logger = logging.getLogger(__name__)

StateCallback = Callable[["AutoCompleteService"], None]

DEFAULT_ERROR_MESSAGE = "Failed to fetch suggestions"
INVALID_RESPONSE_MESSAGE = "Suggestion service returned an invalid response"


class AutoCompleteService:
    """Suggestion search state and keyboard selection for one input field.

    Search triggering:
    - Empty query: searched immediately (recent and frequent items)
    - Shorter than min_query_length: no search, suggestions cleared
    - Otherwise: searched after debounce_ms of quiet

    Failures never escape the service; they are reported through ``error``
    while the previous suggestions stay visible. Cancellation is not a
    failure and leaves ``error`` untouched.
    """

    def __init__(self, source: SuggestionSource, config: AutoCompleteConfig | None = None):
        """Initialize the service.

        Args:
            source: Suggestion search collaborator
            config: Debounce, query length and result limit settings
        """
        self.source = source
        self.config = config or AutoCompleteConfig()

        self._query = ""
        self._last_search_query = ""
        self._suggestions: tuple[Suggestion, ...] = ()
        self._selected_index = -1
        self._is_loading = False
        self._error: str | None = None

        self._generation = 0
        self._pending: asyncio.Task | None = None
        self._subscribers: list[StateCallback] = []

    async def __aenter__(self):
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - cancel outstanding work."""
        self.cleanup()

    # --- State ---

    @property
    def query(self) -> str:
        return self._query

    @query.setter
    def query(self, value: str) -> None:
        """Update the search text and schedule a search for it.

        Must be called while an event loop is running.
        """
        if value == self._query:
            return
        self._query = value
        self._selected_index = -1
        self._notify()
        self._schedule(value.strip())

    @property
    def suggestions(self) -> tuple[Suggestion, ...]:
        return self._suggestions

    @property
    def activity_suggestions(self) -> tuple[Suggestion, ...]:
        return tuple(s for s in self._suggestions if s.type == "activity")

    @property
    def tag_suggestions(self) -> tuple[Suggestion, ...]:
        return tuple(s for s in self._suggestions if s.type == "tag")

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def selected_index(self) -> int:
        return self._selected_index

    @property
    def selected_suggestion(self) -> Suggestion | None:
        if 0 <= self._selected_index < len(self._suggestions):
            return self._suggestions[self._selected_index]
        return None

    def subscribe(self, callback: StateCallback) -> Callable[[], None]:
        """Register a callback invoked after every state change.

        Returns:
            A function that removes the callback again
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            callback(self)

    # --- Searching ---

    async def perform_search(self, query: str) -> None:
        """Search for query using the triggering policy.

        Returns once the search has finished, or has been superseded or
        cancelled. Never raises for search failures.
        """
        await self._wait(self._schedule(query))

    async def get_initial_suggestions(self) -> None:
        """Load suggestions for the empty query without waiting for input."""
        await self._wait(self._schedule("", debounce=False))

    async def retry(self) -> None:
        """Re-issue the most recent search immediately, unless one is running."""
        if self._is_loading:
            return
        await self._wait(self._schedule(self._last_search_query, debounce=False))

    def cleanup(self) -> None:
        """Cancel the pending debounce timer and any in-flight request."""
        self._cancel_pending()

    @staticmethod
    async def _wait(task: asyncio.Task | None) -> None:
        # asyncio.wait neither raises the task's CancelledError nor cancels
        # the task when the caller is cancelled
        if task is not None:
            await asyncio.wait({task})

    def _cancel_pending(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None
        self._generation += 1
        if self._is_loading:
            self._is_loading = False
            self._notify()

    def _schedule(self, query: str, *, debounce: bool = True) -> asyncio.Task | None:
        self._cancel_pending()

        if query and len(query) < self.config.min_query_length:
            logger.debug(f"Query '{query}' below minimum length {self.config.min_query_length}")
            self._error = None
            self._replace_suggestions(())
            return None

        delay = self.config.debounce_ms / 1000 if query and debounce else 0
        self._last_search_query = query
        self._pending = asyncio.create_task(self._run_search(query, delay, self._generation))
        return self._pending

    async def _run_search(self, query: str, delay: float, generation: int) -> None:
        if delay > 0:
            await asyncio.sleep(delay)
        if generation != self._generation:
            return

        self._is_loading = True
        self._error = None
        self._notify()

        try:
            results = await self.source.search(query, limit=self.config.max_suggestions)
            suggestions = self._validate(results)
        except asyncio.CancelledError:
            logger.debug(f"Suggestion search for '{query}' cancelled")
            raise
        except Exception as e:
            if generation != self._generation:
                return
            logger.warning(f"Suggestion search for '{query}' failed: {e}")
            self._error = self._error_message(e)
            self._is_loading = False
            self._notify()
            return

        if generation != self._generation:
            logger.debug(f"Discarding stale suggestions for '{query}'")
            return

        self._is_loading = False
        self._replace_suggestions(suggestions)

    @staticmethod
    def _validate(results: Iterable[Suggestion | dict]) -> tuple[Suggestion, ...]:
        return tuple(
            r if isinstance(r, Suggestion) else Suggestion.model_validate(r)
            for r in results
        )

    @staticmethod
    def _error_message(error: Exception) -> str:
        if isinstance(error, SuggestionSearchError):
            return str(error) or DEFAULT_ERROR_MESSAGE
        if isinstance(error, ValidationError):
            return INVALID_RESPONSE_MESSAGE
        return DEFAULT_ERROR_MESSAGE

    def _replace_suggestions(self, suggestions: Iterable[Suggestion]) -> None:
        suggestions = tuple(suggestions)
        # Equal payloads keep the current tuple
        if suggestions != self._suggestions:
            self._suggestions = suggestions
        self._selected_index = -1
        self._notify()

    # --- Selection ---

    def select_next(self) -> None:
        """Move selection down; past the last item it returns to no selection."""
        if not self._suggestions:
            return
        if self._selected_index < len(self._suggestions) - 1:
            self._selected_index += 1
        else:
            self._selected_index = -1
        self._notify()

    def select_previous(self) -> None:
        """Move selection up, stopping at no selection."""
        if not self._suggestions or self._selected_index == -1:
            return
        self._selected_index -= 1
        self._notify()

    def select_index(self, index: int) -> bool:
        """Select a specific suggestion, or -1 to clear the selection.

        Returns:
            False if index is out of range and nothing changed
        """
        if not -1 <= index < len(self._suggestions):
            return False
        self._selected_index = index
        self._notify()
        return True

    def select_current(self) -> Suggestion | None:
        """Return the selected suggestion, if any."""
        return self.selected_suggestion
