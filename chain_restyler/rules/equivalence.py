"""
Equivalence checker for candidate rewrites.

A rewrite is accepted only if the observable call counts are preserved
modulo the rule's declared substitutions: a call may only disappear if
the rule declares it removed, and only appear if it declares it added.
Arguments of calls a rule does not substitute must be structurally
identical; deep equivalence of arbitrary expressions is out of scope.
"""

import logging
from collections import Counter
from dataclasses import dataclass

from ..syntax.nodes import (
    Argument,
    ChainExpression,
    ClassRef,
    Closure,
    FunctionCall,
    Node,
    walk,
)
from .base import RewriteRule, Substitution
from .config import StyleConfig

logger = logging.getLogger(__name__)

Effect = tuple[str, tuple[Argument, ...] | None]


@dataclass(frozen=True)
class Accept:
    """The rewrite preserves observable behavior."""

    @property
    def accepted(self) -> bool:
        return True


@dataclass(frozen=True)
class Reject:
    """The rewrite changes observable behavior and must be discarded."""

    reason: str

    @property
    def accepted(self) -> bool:
        return False


Verdict = Accept | Reject


def call_effects(node: Node) -> list[Effect]:
    """Every call in ``node`` at any depth, as ``(key, args)`` pairs.

    Static calls are keyed ``Receiver::name``; chain calls, property
    fetches and function calls by their bare name.
    """
    effects: list[Effect] = []
    for sub in walk(node):
        if isinstance(sub, ChainExpression):
            for call in sub.calls:
                if call.static and isinstance(sub.root, ClassRef):
                    key = f"{sub.root.name}::{call.name}"
                else:
                    key = call.name
                effects.append((key, call.args))
        elif isinstance(sub, FunctionCall):
            effects.append((f"{sub.name}()", sub.args))
    return effects


class EquivalenceChecker:
    """Validates candidate rewrites against a rule's substitution allow-list."""

    def __init__(self, config: StyleConfig):
        self.config = config

    def check(self, before: Node, after: Node, rule: RewriteRule) -> Verdict:
        """Compare ``before`` and ``after`` for the rewrite made by ``rule``.

        Args:
            before: Subtree the rule matched
            after: Subtree the rule produced
            rule: The rule, whose substitution list is consulted

        Returns:
            Accept, or Reject with a reason
        """
        substitution = rule.substitution(self.config)
        before_effects = call_effects(before)
        after_effects = call_effects(after)

        reason = (
            self._check_names(before_effects, after_effects, substitution)
            or self._check_arguments(before_effects, after_effects, substitution)
            or self._check_closure_signature(before, after)
        )
        if reason:
            logger.debug(f"Rejected {rule.rule_id}: {reason}")
            return Reject(reason)
        return Accept()

    def _check_names(
        self,
        before: list[Effect],
        after: list[Effect],
        substitution: Substitution,
    ) -> str | None:
        # Substituted names may also occur elsewhere in the subtree.
        counted_before = Counter(key for key, _ in before)
        counted_after = Counter(key for key, _ in after)

        lost = {
            key
            for key in counted_before
            if counted_after[key] < counted_before[key] and not substitution.is_removed(key)
        }
        gained = {
            key
            for key in counted_after
            if counted_after[key] > counted_before[key] and not substitution.is_added(key)
        }
        if lost:
            return f"calls removed without substitution: {', '.join(sorted(lost))}"
        if gained:
            return f"calls introduced without substitution: {', '.join(sorted(gained))}"
        return None

    def _check_arguments(
        self,
        before: list[Effect],
        after: list[Effect],
        substitution: Substitution,
    ) -> str | None:
        counted_before = Counter(e for e in before if not substitution.covers(e[0]))
        counted_after = Counter(e for e in after if not substitution.covers(e[0]))
        if counted_before == counted_after:
            return None

        changed = sorted(
            {key for key, _ in (counted_before - counted_after) + (counted_after - counted_before)}
        )
        return f"arguments changed for: {', '.join(changed)}"

    def _check_closure_signature(self, before: Node, after: Node) -> str | None:
        if not (isinstance(before, Closure) and isinstance(after, Closure)):
            return None
        if (
            before.params != after.params
            or before.uses != after.uses
            or before.static != after.static
            or before.return_type != after.return_type
        ):
            return "closure signature changed"
        return None
