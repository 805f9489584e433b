"""Error types raised by the restyling pipeline.

Only catalog and configuration failures are fatal. Syntax errors are
reported per fragment and leave the fragment untouched.
"""

from typing import Any


class RestylerError(Exception):
    """Base class for all chain-restyler errors."""


class ChainSyntaxError(RestylerError):
    """A fragment does not match the restricted chain grammar."""

    def __init__(self, reason: str, position: int, line: int = 1, column: int = 1):
        self.reason = reason
        self.position = position
        self.line = line
        self.column = column
        super().__init__(f"line {line}, column {column}: {reason}")

    @classmethod
    def at(cls, source: str, position: int, reason: str) -> "ChainSyntaxError":
        """Build an error for an offset into ``source``, computing line/column."""
        position = max(0, min(position, len(source)))
        line = source.count("\n", 0, position) + 1
        line_start = source.rfind("\n", 0, position) + 1
        return cls(reason, position, line, position - line_start + 1)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "reason": self.reason,
            "position": self.position,
            "line": self.line,
            "column": self.column,
        }


class CatalogLoadError(RestylerError):
    """A rule definition is malformed; the run aborts before any fragment."""

    def __init__(self, message: str, rule_id: str | None = None):
        self.rule_id = rule_id
        super().__init__(f"{rule_id}: {message}" if rule_id else message)


class ConfigurationError(RestylerError):
    """Style configuration could not be loaded or failed validation."""

    def __init__(self, message: str, config_file: str | None = None):
        self.message = message
        self.config_file = config_file
        super().__init__(f"{config_file}: {message}" if config_file else message)
