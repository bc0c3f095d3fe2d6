"""Activity text parsing."""

from activity_tracker.parsing.input_parser import ActivityInputState, InputParser, format_input_help

__all__ = [
    "ActivityInputState",
    "InputParser",
    "format_input_help",
]
