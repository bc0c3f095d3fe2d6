"""HTTP client for the activity tracker backend.

Endpoints used:
- GET /api/activities/suggestions: ranked activity and tag suggestions
- POST /api/activities: persist a timed activity
- PATCH /api/activities/{id}: update a stored activity (e.g. focus rating)

Network failures, HTTP error statuses and malformed bodies are raised as
typed exceptions. Task cancellation is not caught here: cancelling the
awaiting task aborts the request and propagates CancelledError.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx
from pydantic import ValidationError

from activity_tracker.exceptions import ActivityPersistenceError, SuggestionSearchError
from activity_tracker.schemas import ActivityInput, Suggestion, SuggestionResponse
from activity_tracker.utils.config import APIConfig

logger = logging.getLogger(__name__)

SUGGESTIONS_PATH = "/api/activities/suggestions"
ACTIVITIES_PATH = "/api/activities"


class SuggestionSource(ABC):
    """Anything that can answer a suggestion query."""

    @abstractmethod
    async def search(self, query: str, limit: int = 10) -> list[Suggestion]:
        """Return suggestions for query, most relevant first.

        Raises:
            SuggestionSearchError: If the search fails
        """


class SuggestionClient(SuggestionSource):
    """Async HTTP client for suggestion search and activity persistence.

    Uses httpx with a retrying transport. The backend's ranking is trusted
    as-is; results are only validated, never re-sorted.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        max_retries: int = 2,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: Backend base URL (e.g. http://localhost:3000)
            timeout: Request timeout in seconds
            max_retries: Connection retries for failed requests
            transport: Optional transport override (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        if transport is None:
            transport = httpx.AsyncHTTPTransport(retries=max_retries)
        self.client = httpx.AsyncClient(
            headers={"Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_config(cls, config: APIConfig) -> "SuggestionClient":
        """Create a client from the api section of the configuration."""
        return cls(
            base_url=config.base_url,
            timeout=config.timeout_seconds,
            max_retries=config.max_retries,
        )

    async def close(self) -> None:
        """Close HTTP client and cleanup resources."""
        await self.client.aclose()

    async def __aenter__(self):
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - cleanup resources."""
        await self.close()

    async def search(self, query: str, limit: int = 10) -> list[Suggestion]:
        """Fetch suggestions for a (possibly empty) query.

        Args:
            query: Search text; empty returns recent and frequent items
            limit: Maximum number of suggestions to request

        Returns:
            Validated suggestions in backend order

        Raises:
            SuggestionSearchError: On network error, HTTP error status or malformed body
        """
        url = f"{self.base_url}{SUGGESTIONS_PATH}"
        try:
            response = await self.client.get(url, params={"q": query, "limit": limit})
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.warning(f"Suggestion search returned HTTP {status_code} for query '{query}'")
            raise SuggestionSearchError(
                f"Suggestion service responded with status {status_code}",
                status_code=status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.warning(f"Suggestion search request failed: {e}")
            raise SuggestionSearchError("Could not reach the suggestion service") from e

        try:
            body = response.json()
        except ValueError as e:
            logger.warning(f"Suggestion search returned invalid JSON: {response.text[:200]}")
            raise SuggestionSearchError("Suggestion service returned an invalid response") from e

        try:
            parsed = SuggestionResponse.model_validate(body)
        except ValidationError as e:
            logger.warning(f"Suggestion search returned a malformed body: {e}")
            raise SuggestionSearchError("Suggestion service returned an invalid response") from e

        logger.debug(f"Fetched {len(parsed.data)} suggestions for query '{query}'")
        return parsed.data

    async def create_activity(self, activity: ActivityInput) -> dict[str, Any]:
        """Persist an activity.

        Args:
            activity: Activity payload built from parsed input

        Returns:
            The stored activity as returned by the backend

        Raises:
            ActivityPersistenceError: If the backend rejects or cannot be reached
        """
        url = f"{self.base_url}{ACTIVITIES_PATH}"
        try:
            response = await self.client.post(url, json=activity.to_payload())
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(f"Creating activity failed with HTTP {status_code}")
            raise ActivityPersistenceError(
                f"Activity service responded with status {status_code}",
                status_code=status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Creating activity failed: {e}")
            raise ActivityPersistenceError("Could not reach the activity service") from e
        except ValueError as e:
            raise ActivityPersistenceError("Activity service returned an invalid response") from e

        logger.info(f"Created activity: {activity.title[:50]}")
        if isinstance(body, dict) and isinstance(body.get("data"), dict):
            return body["data"]
        return body

    async def update_activity(self, activity_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        """Apply a partial update to a stored activity.

        Args:
            activity_id: ID of the activity to update
            changes: Fields to change, using the backend's camelCase names

        Returns:
            The updated activity as returned by the backend

        Raises:
            ActivityPersistenceError: If the backend rejects or cannot be reached
        """
        url = f"{self.base_url}{ACTIVITIES_PATH}/{activity_id}"
        try:
            response = await self.client.patch(url, json=changes)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(f"Updating activity {activity_id} failed with HTTP {status_code}")
            raise ActivityPersistenceError(
                f"Activity service responded with status {status_code}",
                status_code=status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Updating activity {activity_id} failed: {e}")
            raise ActivityPersistenceError("Could not reach the activity service") from e
        except ValueError as e:
            raise ActivityPersistenceError("Activity service returned an invalid response") from e

        if isinstance(body, dict) and isinstance(body.get("data"), dict):
            return body["data"]
        return body
