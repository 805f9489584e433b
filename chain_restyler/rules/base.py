"""
Base classes and types for the rewrite rule catalog.

This module provides the foundational abstractions for rewrite rules:
call categories, the substitution allow-list consulted by the
equivalence checker, the per-site rewrite context, and the rule and
advisory-rule base classes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from fnmatch import fnmatchcase
from typing import TYPE_CHECKING, Any

from ..syntax.nodes import ChainExpression, Node

if TYPE_CHECKING:
    from .config import StyleConfig


class Category(Enum):
    """Semantic class of a call; governs its canonical position in a chain."""

    IDENTIFICATION = "identification"
    LABEL_DESCRIPTION = "label_description"
    PLACEHOLDER = "placeholder"
    VALIDATION = "validation"
    REACTIVE_BEHAVIOR = "reactive_behavior"
    CALLBACK = "callback"
    TABLE_FEATURE = "table_feature"
    VISIBILITY_CONTROL = "visibility_control"
    OTHER = "other"


class WarningKind(Enum):
    """Kinds of non-fatal conditions reported in a RewriteResult."""

    ADVISORY = "advisory"  # Flag-only rule matched (e.g. duplicate extraction)
    EQUIVALENCE_REJECTED = "equivalence_rejected"  # Rewrite discarded
    PASS_LIMIT_EXCEEDED = "pass_limit_exceeded"  # Stopped before fixpoint
    IDEMPOTENCE_VIOLATION = "idempotence_violation"  # Rule matched its own output
    RULE_ERROR = "rule_error"  # Rule raised while matching or rewriting
    TIMED_OUT = "timed_out"  # Batch caller gave up on the fragment


@dataclass(frozen=True)
class RewriteWarning:
    """A non-fatal note attached to a rewrite result."""

    kind: WarningKind
    message: str
    rule_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "rule_id": self.rule_id,
        }


@dataclass(frozen=True)
class Substitution:
    """Call keys a rule is allowed to remove, add or rewrite.

    Keys are ``Receiver::name`` for static calls and ``name`` otherwise;
    entries are fnmatch patterns. Calls matching ``rewritten`` must be
    present both before and after, but their arguments may change.
    """

    removed: tuple[str, ...] = ()
    added: tuple[str, ...] = ()
    rewritten: tuple[str, ...] = ()

    @staticmethod
    def _matches(key: str, patterns: tuple[str, ...]) -> bool:
        return any(fnmatchcase(key, pattern) for pattern in patterns)

    def is_removed(self, key: str) -> bool:
        return self._matches(key, self.removed)

    def is_added(self, key: str) -> bool:
        return self._matches(key, self.added)

    def covers(self, key: str) -> bool:
        """Whether ``key`` is exempt from the argument comparison."""
        return self._matches(key, self.removed + self.added + self.rewritten)


@dataclass
class RewriteContext:
    """Context passed to rules for one site of one pass."""

    config: "StyleConfig"
    ancestors: tuple[Node, ...] = field(default_factory=tuple)

    @property
    def parent(self) -> Node | None:
        return self.ancestors[-1] if self.ancestors else None

    def enclosing_declarations(self) -> list[ChainExpression]:
        """Declarations containing the site, innermost first."""
        return [
            node
            for node in reversed(self.ancestors)
            if isinstance(node, ChainExpression) and node.is_declaration
        ]


class RewriteRule(ABC):
    """Abstract base class for all catalog rules.

    A rule is a pure (matcher, rewriter) pair with a priority and an
    idempotence flag. ``target`` restricts the node types the engine
    offers to the rule.
    """

    @property
    @abstractmethod
    def rule_id(self) -> str:
        """Unique rule identifier (e.g., 'ORDER.CATEGORY_SORT').

        Format: FAMILY.RULE_NAME, both parts in UPPER_SNAKE_CASE.
        """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable rule name."""

    @property
    @abstractmethod
    def family(self) -> str:
        """Rule family: ordering, closures, substitution, structure."""

    @property
    @abstractmethod
    def target(self) -> type[Node] | tuple[type[Node], ...]:
        """Node type(s) this rule inspects."""

    @property
    def priority(self) -> int:
        """Higher priority wins when several rules match the same site."""
        return 0

    @property
    def idempotent(self) -> bool:
        """Whether applying the rule to its own output changes nothing."""
        return True

    @property
    def is_advisory(self) -> bool:
        """Advisory rules only report; they never change the tree."""
        return False

    @property
    def description(self) -> str:
        """Detailed description of what this rule rewrites."""
        return f"Rule {self.rule_id}: {self.name}"

    def substitution(self, config: "StyleConfig") -> Substitution:
        """Calls this rule may remove, add or rewrite.

        Args:
            config: Active style configuration (some allow-lists depend on it)

        Returns:
            The allow-list the equivalence checker applies to this rule
        """
        return Substitution()

    def applies_to(self, node: Node) -> bool:
        return isinstance(node, self.target)

    @abstractmethod
    def matches(self, node: Node, context: RewriteContext) -> bool:
        """Return True if the rule's structural template matches ``node``."""

    @abstractmethod
    def rewrite(self, node: Node, context: RewriteContext) -> Node:
        """Return the rewritten node. Only called after ``matches``."""

    def to_dict(self) -> dict[str, Any]:
        """Describe the rule for listings."""
        targets = self.target if isinstance(self.target, tuple) else (self.target,)
        return {
            "rule_id": self.rule_id,
            "name": self.name,
            "family": self.family,
            "target": [t.__name__ for t in targets],
            "priority": self.priority,
            "idempotent": self.idempotent,
            "advisory": self.is_advisory,
            "description": self.description,
        }


class AdvisoryRule(RewriteRule):
    """A rule that flags a site for human review instead of rewriting it."""

    @property
    def is_advisory(self) -> bool:
        return True

    @abstractmethod
    def advise(self, node: Node, context: RewriteContext) -> list[str]:
        """Return warning messages for ``node`` (empty when nothing to flag)."""

    def matches(self, node: Node, context: RewriteContext) -> bool:
        return bool(self.advise(node, context))

    def rewrite(self, node: Node, context: RewriteContext) -> Node:
        return node
