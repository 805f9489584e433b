"""CLI package for chain-restyler.

Modules:
    main: click command group (apply, rules, config)
    errors: Structured error types with recovery suggestions
"""

from .errors import (
    CatalogError,
    CLIError,
    ConfigurationError,
    ErrorCategory,
    InputFileError,
    handle_exception,
)

__all__ = [
    "CLIError",
    "CatalogError",
    "ConfigurationError",
    "ErrorCategory",
    "InputFileError",
    "handle_exception",
]
