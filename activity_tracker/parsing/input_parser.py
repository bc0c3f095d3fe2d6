"""Parser for free-text activity input.

Supports:
- #tag: Categorize the activity (any run of letters, digits, underscores)
- !N: Priority, where N is 1, 2 or 3 (first occurrence wins)
- *N: Focus rating, where N is 1 to 5 (first occurrence wins)

Everything else is the activity title. The parser is total: any string,
including empty or adversarial input, yields a ParsedActivity.
"""

import re
from datetime import datetime
from typing import Callable

from activity_tracker.schemas import ActivityInput, ParsedActivity

ParsedCallback = Callable[[ParsedActivity], None]


class InputParser:
    """Parser for activity input text."""

    # Token patterns
    TAG_PATTERN = re.compile(r"#(\w+)")
    PRIORITY_PATTERN = re.compile(r"!([1-3])")
    FOCUS_RATING_PATTERN = re.compile(r"\*([1-5])")

    # Removal patterns: every priority marker is stripped, valid or not
    TAG_STRIP_PATTERN = re.compile(r"#\w+")
    PRIORITY_STRIP_PATTERN = re.compile(r"!\d")
    WHITESPACE_PATTERN = re.compile(r"\s+")

    @staticmethod
    def parse(text: str) -> ParsedActivity:
        """Parse activity input into structured fields.

        Args:
            text: The raw input text from the user

        Returns:
            ParsedActivity with tags, priority, focus rating and clean text

        Examples:
            >>> InputParser.parse("Work on frontend #react #typescript !2").clean_text
            'Work on frontend'

            >>> InputParser.parse("Work on frontend #react #typescript !2").tags
            ['react', 'typescript']
        """
        return ParsedActivity(
            original_text=text,
            clean_text=InputParser.clean_text(text),
            tags=InputParser.extract_tags(text),
            priority=InputParser.extract_priority(text),
            focus_rating=InputParser.extract_focus_rating(text),
        )

    @staticmethod
    def extract_tags(text: str) -> list[str]:
        """Extract tags in order of appearance, duplicates included."""
        return InputParser.TAG_PATTERN.findall(text)

    @staticmethod
    def extract_priority(text: str) -> int | None:
        """Extract the first valid priority marker.

        Markers outside 1-3 (``!0``, ``!9``) are ignored here but still
        removed by clean_text.
        """
        match = InputParser.PRIORITY_PATTERN.search(text)
        return int(match.group(1)) if match else None

    @staticmethod
    def extract_focus_rating(text: str) -> int | None:
        """Extract the first focus rating marker (``*1`` to ``*5``)."""
        match = InputParser.FOCUS_RATING_PATTERN.search(text)
        return int(match.group(1)) if match else None

    @staticmethod
    def clean_text(text: str) -> str:
        """Remove tags and priority markers, returning display text.

        Single pass per pattern: text exposed by a removal is not rescanned.
        """
        text = InputParser.TAG_STRIP_PATTERN.sub("", text)
        text = InputParser.PRIORITY_STRIP_PATTERN.sub("", text)
        return InputParser.WHITESPACE_PATTERN.sub(" ", text).strip()


class ActivityInputState:
    """Current text of one activity input field and its parsed view.

    Parsed fields are recomputed from the latest text on every access, so
    they can never lag behind an update. Subscribers are notified with the
    new ParsedActivity each time the text changes.
    """

    def __init__(self, text: str = ""):
        self._text = text
        self._subscribers: list[ParsedCallback] = []

    @property
    def text(self) -> str:
        return self._text

    @text.setter
    def text(self, value: str) -> None:
        if value == self._text:
            return
        self._text = value
        parsed = self.parsed
        for callback in list(self._subscribers):
            callback(parsed)

    @property
    def parsed(self) -> ParsedActivity:
        return InputParser.parse(self._text)

    @property
    def tags(self) -> list[str]:
        return InputParser.extract_tags(self._text)

    @property
    def priority(self) -> int | None:
        return InputParser.extract_priority(self._text)

    @property
    def focus_rating(self) -> int | None:
        return InputParser.extract_focus_rating(self._text)

    @property
    def clean_text(self) -> str:
        return InputParser.clean_text(self._text)

    def subscribe(self, callback: ParsedCallback) -> Callable[[], None]:
        """Register a callback for text changes.

        Returns:
            A function that removes the callback again
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def create_activity_input(
        self,
        *,
        duration_ms: int,
        start_time: datetime,
        end_time: datetime,
    ) -> ActivityInput:
        """Build the persistence payload from the current text."""
        return self.parsed.to_activity_input(
            duration_ms=duration_ms,
            start_time=start_time,
            end_time=end_time,
        )


def format_input_help() -> str:
    """Get help text for activity input markers.

    Returns:
        Formatted help string
    """
    return """Activity Input Markers:
    #tag - Add a tag (letters, digits, underscores)
    !1 !2 !3 - Set priority (1 is most urgent)
    *1 .. *5 - Set focus rating (the marker stays in the title)"""
