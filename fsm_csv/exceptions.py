"""Package-specific exception types."""

from __future__ import annotations


class FsmCsvError(ValueError):
    """Base class for fsm-csv errors.

    Only programmer errors are raised. Malformed user text is reported through
    tokenizer warnings and model errors instead.
    """


class ConfigError(FsmCsvError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`field_separators` must not be empty")
    """


class OverlappingDelimitersError(ConfigError):
    """Raised when a value is shared between delimiter and separator sets.

    Args:
        value: The string found in more than one set.
    """

    def __init__(self, value: str):
        self.value = value
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        return (
            f"Value {self.value!r} cannot be shared between field delimiter, "
            "field separators and line separators"
        )
