"""Rewrite rules, the pattern catalog and the rule engine."""

from .base import (
    AdvisoryRule,
    Category,
    RewriteContext,
    RewriteRule,
    RewriteWarning,
    Substitution,
    WarningKind,
)
from .catalog import PatternCatalog, builtin_rules, load_default_catalog
from .config import SectionGroup, StyleConfig, StyleConfigLoader
from .engine import EngineOutcome, RuleEngine
from .equivalence import Accept, EquivalenceChecker, Reject

__all__ = [
    "Accept",
    "AdvisoryRule",
    "Category",
    "EngineOutcome",
    "EquivalenceChecker",
    "PatternCatalog",
    "Reject",
    "RewriteContext",
    "RewriteRule",
    "RewriteWarning",
    "RuleEngine",
    "SectionGroup",
    "StyleConfig",
    "StyleConfigLoader",
    "Substitution",
    "WarningKind",
    "builtin_rules",
    "load_default_catalog",
]
