"""
Public entry point: restyle one source fragment.

``apply`` runs parse -> rule engine -> emit and never raises for bad
input; a fragment outside the grammar comes back untouched with its
``syntax_error`` set.
"""

import logging
from dataclasses import dataclass, field
from functools import lru_cache

from .errors import ChainSyntaxError
from .rules.base import RewriteWarning
from .rules.catalog import PatternCatalog, load_default_catalog
from .rules.config import StyleConfig
from .rules.engine import RuleEngine
from .syntax.emitter import emit_fragment
from .syntax.parser import parse_fragment

logger = logging.getLogger(__name__)


@dataclass
class RewriteResult:
    """Outcome of restyling one fragment."""

    text: str
    original: str
    applied_rule_ids: list[str] = field(default_factory=list)
    rejected_rule_ids: set[str] = field(default_factory=set)
    warnings: list[RewriteWarning] = field(default_factory=list)
    syntax_error: ChainSyntaxError | None = None
    passes: int = 0
    execution_time_ms: float = 0.0

    @property
    def changed(self) -> bool:
        """Whether the output text differs from the input."""
        return self.text != self.original

    @property
    def ok(self) -> bool:
        return self.syntax_error is None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "text": self.text,
            "changed": self.changed,
            "applied_rule_ids": list(self.applied_rule_ids),
            "rejected_rule_ids": sorted(self.rejected_rule_ids),
            "warnings": [w.to_dict() for w in self.warnings],
            "syntax_error": self.syntax_error.to_dict() if self.syntax_error else None,
            "passes": self.passes,
            "execution_time_ms": self.execution_time_ms,
        }


@lru_cache(maxsize=1)
def get_default_catalog() -> PatternCatalog:
    """The built-in catalog with the default style configuration."""
    return load_default_catalog(StyleConfig())


def apply(
    source: str,
    catalog: PatternCatalog | None = None,
    max_passes: int | None = None,
    config: StyleConfig | None = None,
) -> RewriteResult:
    """Restyle a chained-call fragment.

    Args:
        source: Fragment text (one or more declarations)
        catalog: Frozen pattern catalog (defaults to the built-in one)
        max_passes: Pass cap (None = use the configured value)
        config: Style configuration (defaults to the catalog's)

    Returns:
        RewriteResult. On a syntax error the text is the original and no
        rule is applied.
    """
    if catalog is None:
        catalog = get_default_catalog() if config is None else load_default_catalog(config)

    try:
        fragment = parse_fragment(source)
    except ChainSyntaxError as e:
        logger.warning(f"Fragment left unchanged: {e}")
        return RewriteResult(text=source, original=source, syntax_error=e)

    engine = RuleEngine(catalog, config)
    outcome = engine.run(fragment, max_passes=max_passes)

    text = emit_fragment(outcome.fragment) if outcome.changed else source
    return RewriteResult(
        text=text,
        original=source,
        applied_rule_ids=outcome.applied_rule_ids,
        rejected_rule_ids=outcome.rejected_rule_ids,
        warnings=outcome.warnings,
        passes=outcome.passes,
        execution_time_ms=outcome.execution_time_ms,
    )
