"""Activity tracker input core: activity text parsing and autocomplete."""

__version__ = "0.1.0"
