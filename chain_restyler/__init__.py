"""Deterministic restyling of fluent UI-builder method chains.

The pipeline is parser -> rule engine (with equivalence checking) ->
emitter. ``apply`` runs it for one source fragment.
"""

from .api import RewriteResult, apply, get_default_catalog
from .errors import (
    CatalogLoadError,
    ChainSyntaxError,
    ConfigurationError,
    RestylerError,
)

__version__ = "0.4.0"

__all__ = [
    "apply",
    "get_default_catalog",
    "RewriteResult",
    "RestylerError",
    "ChainSyntaxError",
    "CatalogLoadError",
    "ConfigurationError",
    "__version__",
]
