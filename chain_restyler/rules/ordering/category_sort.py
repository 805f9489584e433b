"""
Category ordering rule.

Reorders the calls of a component declaration so that categories appear
in the configured total order. The constructor stays first, order-exempt
calls keep their absolute position, and calls of equal category keep
their relative order.
"""

from ...syntax.nodes import Call, ChainExpression, Node
from ..base import RewriteContext, RewriteRule
from ..config import StyleConfig


def canonical_order(calls: tuple[Call, ...], config: StyleConfig) -> tuple[Call, ...]:
    """Return ``calls`` stable-sorted by category rank.

    Index 0 (the constructor) and exempt calls stay where they are; the
    remaining calls are sorted into the remaining slots.
    """
    head, rest = calls[0], calls[1:]
    slots = [i for i, call in enumerate(rest) if not config.is_exempt(call.name)]
    movable = sorted(
        (rest[i] for i in slots),
        key=lambda call: config.rank(config.category_of(call.name)),
    )

    ordered = list(rest)
    for slot, call in zip(slots, movable, strict=True):
        ordered[slot] = call
    return (head, *ordered)


class CategorySortRule(RewriteRule):
    """Sort component calls by category (identification, label, ... other)."""

    @property
    def rule_id(self) -> str:
        return "ORDER.CATEGORY_SORT"

    @property
    def name(self) -> str:
        return "Category Ordering"

    @property
    def family(self) -> str:
        return "ordering"

    @property
    def target(self) -> type[Node]:
        return ChainExpression

    @property
    def priority(self) -> int:
        return 0

    @property
    def description(self) -> str:
        return (
            "Stable-sorts the calls of a component declaration by the "
            "configured category order; the constructor and order-exempt "
            "calls never move."
        )

    def matches(self, node: Node, context: RewriteContext) -> bool:
        if not context.config.is_component(node) or len(node.calls) < 3:
            return False
        return canonical_order(node.calls, context.config) != node.calls

    def rewrite(self, node: Node, context: RewriteContext) -> Node:
        return node.with_calls(canonical_order(node.calls, context.config))
