"""
Rule engine: applies catalog rules to a fragment until a fixpoint.

Each pass is one depth-first, pre-order traversal. At every node the
matching rules are ordered by priority and registration index, each
candidate rewrite goes through the equivalence checker, and the first
accepted one replaces the node. Scanning then continues into the
rewritten node's children. Passes repeat until one changes nothing or
the pass cap is reached. At the cap, a match-only scan decides whether
the result is already a fixpoint before a pass-limit warning is raised.
"""

import logging
import time
from dataclasses import dataclass, field

from ..syntax.nodes import Fragment, Node, child_nodes, map_children
from .base import RewriteContext, RewriteRule, RewriteWarning, WarningKind
from .catalog import PatternCatalog
from .config import StyleConfig
from .equivalence import EquivalenceChecker, Reject

logger = logging.getLogger(__name__)


@dataclass
class EngineOutcome:
    """Result of running the engine over one fragment."""

    fragment: Fragment
    applied_rule_ids: list[str] = field(default_factory=list)
    rejected_rule_ids: set[str] = field(default_factory=set)
    warnings: list[RewriteWarning] = field(default_factory=list)
    passes: int = 0
    reached_fixpoint: bool = False
    execution_time_ms: float = 0.0

    @property
    def changed(self) -> bool:
        return bool(self.applied_rule_ids)


@dataclass
class _RunState:
    """Mutable bookkeeping for a single run."""

    applied: list[str] = field(default_factory=list)
    rejected: set[str] = field(default_factory=set)
    warnings: list[RewriteWarning] = field(default_factory=list)
    seen_warnings: set[RewriteWarning] = field(default_factory=set)
    pass_number: int = 0
    changed: bool = False

    def warn(self, warning: RewriteWarning) -> None:
        if warning not in self.seen_warnings:
            self.seen_warnings.add(warning)
            self.warnings.append(warning)


class RuleEngine:
    """Engine for applying rewrite rules to a parsed fragment.

    Example usage:
        catalog = load_default_catalog()
        engine = RuleEngine(catalog)
        outcome = engine.run(parse_fragment(source))
        print(emit_fragment(outcome.fragment))
    """

    def __init__(
        self,
        catalog: PatternCatalog,
        config: StyleConfig | None = None,
        checker: EquivalenceChecker | None = None,
    ):
        """Initialize the rule engine.

        Args:
            catalog: Frozen pattern catalog
            config: Style configuration (defaults to the catalog's)
            checker: Optional equivalence checker override
        """
        self.catalog = catalog
        self.config = config or catalog.config
        self.checker = checker or EquivalenceChecker(self.config)

    def run(self, fragment: Fragment, max_passes: int | None = None) -> EngineOutcome:
        """Rewrite ``fragment`` to a fixpoint or until the pass cap.

        Args:
            fragment: Parsed fragment
            max_passes: Pass cap (None = use config)

        Returns:
            EngineOutcome with the final fragment and change log
        """
        limit = max_passes if max_passes is not None else self.config.max_passes
        if limit < 1:
            raise ValueError("max_passes must be at least 1")

        start_time = time.time()
        state = _RunState()
        current = fragment
        reached_fixpoint = False

        for pass_number in range(1, limit + 1):
            state.pass_number = pass_number
            state.changed = False
            current = self._visit(current, (), state)
            if not state.changed:
                reached_fixpoint = True
                break

        if not reached_fixpoint and not self._has_pending_match(current, (), state):
            reached_fixpoint = True

        if not reached_fixpoint:
            message = f"Stopped after {limit} passes without reaching a fixpoint"
            logger.warning(message)
            state.warn(RewriteWarning(WarningKind.PASS_LIMIT_EXCEEDED, message))

        return EngineOutcome(
            fragment=current,
            applied_rule_ids=state.applied,
            rejected_rule_ids=state.rejected,
            warnings=state.warnings,
            passes=state.pass_number,
            reached_fixpoint=reached_fixpoint,
            execution_time_ms=(time.time() - start_time) * 1000,
        )

    def _visit(self, node: Node, ancestors: tuple[Node, ...], state: _RunState) -> Node:
        node = self._rewrite_site(node, ancestors, state)
        inner = ancestors + (node,)
        return map_children(node, lambda child: self._visit(child, inner, state))

    def _has_pending_match(
        self, node: Node, ancestors: tuple[Node, ...], state: _RunState
    ) -> bool:
        """Whether any rewrite rule still matches somewhere under ``node``."""
        context = RewriteContext(config=self.config, ancestors=ancestors)
        for rule in self.catalog.rules_for(node):
            if not rule.is_advisory and self._safe_matches(rule, node, context, state):
                return True
        inner = ancestors + (node,)
        return any(self._has_pending_match(child, inner, state) for child in child_nodes(node))

    def _rewrite_site(
        self, node: Node, ancestors: tuple[Node, ...], state: _RunState
    ) -> Node:
        """Apply at most one rewrite to ``node`` for this pass."""
        context = RewriteContext(config=self.config, ancestors=ancestors)
        matched = [
            rule
            for rule in self.catalog.rules_for(node)
            if self._safe_matches(rule, node, context, state)
        ]
        if not matched:
            return node

        for rule in matched:
            if rule.is_advisory:
                self._collect_advice(rule, node, context, state)

        candidates = [rule for rule in matched if not rule.is_advisory]
        if len(candidates) > 1:
            logger.info(
                f"Rule conflict at {type(node).__name__}: "
                f"{', '.join(r.rule_id for r in candidates)}; "
                f"{candidates[0].rule_id} takes precedence",
                extra={"rule_id": candidates[0].rule_id, "pass_number": state.pass_number},
            )

        for rule in candidates:
            rewritten = self._safe_rewrite(rule, node, context, state)
            if rewritten is None or rewritten == node:
                continue

            verdict = self.checker.check(node, rewritten, rule)
            if isinstance(verdict, Reject):
                state.rejected.add(rule.rule_id)
                message = f"Rewrite by {rule.rule_id} rejected: {verdict.reason}"
                logger.warning(
                    message,
                    extra={"rule_id": rule.rule_id, "pass_number": state.pass_number},
                )
                state.warn(
                    RewriteWarning(WarningKind.EQUIVALENCE_REJECTED, message, rule.rule_id)
                )
                continue

            state.applied.append(rule.rule_id)
            state.changed = True
            logger.debug(
                f"Applied {rule.rule_id} in pass {state.pass_number}",
                extra={"rule_id": rule.rule_id, "pass_number": state.pass_number},
            )
            if rule.idempotent and self._safe_matches(rule, rewritten, context, state):
                state.warn(
                    RewriteWarning(
                        WarningKind.IDEMPOTENCE_VIOLATION,
                        f"{rule.rule_id} is flagged idempotent but matches its own output",
                        rule.rule_id,
                    )
                )
            return rewritten

        return node

    def _collect_advice(
        self,
        rule: RewriteRule,
        node: Node,
        context: RewriteContext,
        state: _RunState,
    ) -> None:
        try:
            messages = rule.advise(node, context)
        except Exception as e:
            self._record_rule_error(rule, e, state)
            return
        for message in messages:
            state.warn(RewriteWarning(WarningKind.ADVISORY, message, rule.rule_id))

    def _safe_matches(
        self,
        rule: RewriteRule,
        node: Node,
        context: RewriteContext,
        state: _RunState,
    ) -> bool:
        try:
            return rule.matches(node, context)
        except Exception as e:
            self._record_rule_error(rule, e, state)
            return False

    def _safe_rewrite(
        self,
        rule: RewriteRule,
        node: Node,
        context: RewriteContext,
        state: _RunState,
    ) -> Node | None:
        try:
            return rule.rewrite(node, context)
        except Exception as e:
            self._record_rule_error(rule, e, state)
            return None

    def _record_rule_error(
        self, rule: RewriteRule, error: Exception, state: _RunState
    ) -> None:
        message = f"Rule {rule.rule_id} failed: {type(error).__name__}: {error}"
        logger.warning(message, extra={"rule_id": rule.rule_id})
        state.warn(RewriteWarning(WarningKind.RULE_ERROR, message, rule.rule_id))
