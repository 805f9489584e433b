"""
Date-format substitution.

``->formatStateUsing(fn ($state) => $state->format('M j, Y'))`` becomes
``->date('M j, Y')``. The closure must take exactly one untyped or typed
parameter and do nothing but call ``format`` with one string on it.
"""

from ...syntax.nodes import (
    Argument,
    Call,
    ChainExpression,
    Closure,
    Node,
    StringLiteral,
    Variable,
)
from ..base import RewriteContext, RewriteRule, Substitution
from ..config import StyleConfig


def state_parameter(closure: object) -> str | None:
    """Name of the single plain parameter of an arrow closure, else None."""
    if not isinstance(closure, Closure) or not closure.is_arrow or closure.uses:
        return None
    if len(closure.params) != 1:
        return None
    param = closure.params[0]
    if param.by_ref or param.default is not None:
        return None
    return param.name


class DateFormatRule(RewriteRule):
    """Replace manual date formatting with the date() modifier."""

    @property
    def rule_id(self) -> str:
        return "SUBSTITUTE.DATE_FORMAT"

    @property
    def name(self) -> str:
        return "Date Format Modifier"

    @property
    def family(self) -> str:
        return "substitution"

    @property
    def target(self) -> type[Node]:
        return ChainExpression

    @property
    def priority(self) -> int:
        return 20

    def substitution(self, config: StyleConfig) -> Substitution:
        return Substitution(removed=("formatStateUsing", "format"), added=("date",))

    def _plan(self, node: Node, context: RewriteContext) -> tuple[int, StringLiteral] | None:
        if not context.config.is_component(node) or node.find("date"):
            return None

        indexes = node.find("formatStateUsing")
        if len(indexes) != 1:
            return None
        args = node.calls[indexes[0]].positional()
        if len(args) != 1:
            return None

        param = state_parameter(args[0])
        if param is None:
            return None

        body = args[0].body
        if not (
            isinstance(body, ChainExpression)
            and body.root == Variable(param)
            and len(body.calls) == 1
            and body.calls[0].name == "format"
        ):
            return None

        fmt = body.calls[0].positional()
        if len(fmt) != 1 or not isinstance(fmt[0], StringLiteral):
            return None
        return indexes[0], fmt[0]

    def matches(self, node: Node, context: RewriteContext) -> bool:
        return self._plan(node, context) is not None

    def rewrite(self, node: Node, context: RewriteContext) -> Node:
        index, fmt = self._plan(node, context)
        calls = list(node.calls)
        calls[index] = Call("date", (Argument(fmt),))
        return node.with_calls(tuple(calls))
