"""Structured error types for the CLI with recovery suggestions.

Domain errors raised before any fragment is processed (bad catalog, bad
configuration) are converted to a CLIError so the user gets a message,
a suggestion and a stable exit code.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..errors import CatalogLoadError
from ..errors import ConfigurationError as ConfigError

EXIT_CHANGED = 1
EXIT_FATAL = 2


class ErrorCategory(Enum):
    """Categories of CLI errors for organization and handling."""

    CONFIGURATION = "configuration"  # Invalid or unreadable config files
    CATALOG = "catalog"  # Malformed rule definitions
    FILE_SYSTEM = "file_system"  # Path issues, permissions
    RUNTIME = "runtime"  # Unexpected errors


@dataclass
class CLIError(Exception):
    """Base class for structured CLI errors with recovery suggestions.

    Attributes:
        category: Error category for grouping.
        message: Human-readable error message.
        suggestion: Optional actionable recovery suggestion.
        details: Optional additional details dict.
        exit_code: Exit code to use when this error causes termination.
    """

    category: ErrorCategory
    message: str
    suggestion: str | None = None
    details: dict[str, Any] | None = field(default_factory=dict)
    exit_code: int = EXIT_FATAL

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def format(self, use_color: bool = True) -> str:
        """Format the error for display, with the suggestion if any."""
        red = "\033[91m" if use_color else ""
        cyan = "\033[96m" if use_color else ""
        dim = "\033[2m" if use_color else ""
        reset = "\033[0m" if use_color else ""

        lines = [f"{red}Error:{reset} {self.message}"]
        if self.suggestion:
            lines.append(f"{cyan}Suggestion:{reset} {self.suggestion}")
        if self.details:
            for key, value in self.details.items():
                lines.append(f"{dim}  {key}: {value}{reset}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.format(use_color=False)


class ConfigurationError(CLIError):
    """Error in a restyle.config.json file."""

    def __init__(self, message: str, config_file: str | None = None):
        super().__init__(
            category=ErrorCategory.CONFIGURATION,
            message=message,
            suggestion=(
                "Check the file is valid JSON and that category_order lists "
                "every category once; run 'chain-restyler config' to see the defaults"
            ),
            details={"config_file": config_file} if config_file else None,
        )


class CatalogError(CLIError):
    """A rule in the catalog is malformed."""

    def __init__(self, message: str, rule_id: str | None = None):
        super().__init__(
            category=ErrorCategory.CATALOG,
            message=message,
            suggestion="Check the rule ids listed in disabled_rules and any custom rules",
            details={"rule_id": rule_id} if rule_id else None,
        )


class InputFileError(CLIError):
    """An input file could not be read or written."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            category=ErrorCategory.FILE_SYSTEM,
            message=f"Cannot access {path}: {reason}",
            suggestion="Verify the path exists and you have read/write permissions",
            details={"path": path},
        )


def to_cli_error(error: Exception) -> CLIError | None:
    """Map a domain exception to its CLI counterpart, if it has one."""
    if isinstance(error, CLIError):
        return error
    if isinstance(error, ConfigError):
        return ConfigurationError(error.message, error.config_file)
    if isinstance(error, CatalogLoadError):
        return CatalogError(str(error), error.rule_id)
    return None


def handle_exception(
    error: Exception,
    use_color: bool = True,
    verbose: bool = False,
) -> tuple[str, int]:
    """Convert any exception to formatted output and exit code.

    Args:
        error: The exception to handle.
        use_color: Whether to use color in output.
        verbose: Whether to include full traceback.

    Returns:
        Tuple of (formatted_message, exit_code).
    """
    cli_error = to_cli_error(error)
    if cli_error is not None:
        message = cli_error.format(use_color=use_color)
        exit_code = cli_error.exit_code
    else:
        red = "\033[91m" if use_color else ""
        reset = "\033[0m" if use_color else ""
        message = f"{red}Error:{reset} {error}"
        exit_code = EXIT_FATAL

    if verbose:
        message += "\n\nTraceback:\n" + traceback.format_exc()

    return message, exit_code
