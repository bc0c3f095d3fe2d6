"""Pydantic schemas for parsed input, suggestions and activity payloads."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SuggestionType = Literal["activity", "tag"]


class ParsedActivity(BaseModel):
    """Structured fields extracted from raw activity text.

    Derived data: recomputed from ``original_text`` whenever it changes and
    never persisted directly.
    """

    model_config = ConfigDict(frozen=True)

    original_text: str
    clean_text: str
    tags: list[str] = Field(default_factory=list)
    priority: int | None = None
    focus_rating: int | None = None

    def to_activity_input(
        self,
        *,
        duration_ms: int,
        start_time: datetime,
        end_time: datetime,
    ) -> "ActivityInput":
        """Build the persistence payload for a timed activity."""
        return ActivityInput(
            title=self.clean_text or "Untitled Activity",
            description=self.original_text if self.original_text != self.clean_text else None,
            duration_ms=duration_ms,
            start_time=start_time,
            end_time=end_time,
            tags=list(self.tags),
            priority=self.priority,
            focus_rating=self.focus_rating,
            energy_level=None,
        )


class Suggestion(BaseModel):
    """A ranked autocomplete candidate returned by the search collaborator."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: str
    text: str
    type: SuggestionType
    frequency: int = Field(..., ge=0)
    last_used: datetime | None = Field(default=None, alias="lastUsed")


class SuggestionResponse(BaseModel):
    """Body of the suggestion search endpoint."""

    model_config = ConfigDict(extra="ignore")

    data: list[Suggestion]
    meta: dict[str, Any] | None = None


class ActivityInput(BaseModel):
    """Payload for creating an activity through the persistence API."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=500)
    description: str | None = None
    duration_ms: int = Field(..., ge=0)
    start_time: datetime
    end_time: datetime
    tags: list[str] = Field(default_factory=list)
    priority: int | None = None
    focus_rating: int | None = None
    energy_level: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Serialize with the camelCase field names the backend expects."""
        return self.model_dump(mode="json", by_alias=True)


class ActivityRecord(BaseModel):
    """Minimal view of a stored activity used for suggestion ranking."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str
    tags: list[str] = Field(default_factory=list)
    start_time: datetime
