"""
Character-limit substitution.

``->formatStateUsing(fn ($state) => Str::limit($state, 50))`` becomes
``->limit(50)``.
"""

from ...syntax.nodes import (
    Argument,
    Call,
    ChainExpression,
    ClassRef,
    Node,
    NumberLiteral,
    Variable,
)
from ..base import RewriteContext, RewriteRule, Substitution
from ..config import StyleConfig
from .date_format import state_parameter

STR_CLASSES = ("Str", "\\Illuminate\\Support\\Str", "Illuminate\\Support\\Str")


class CharacterLimitRule(RewriteRule):
    """Replace Str::limit() formatting with the limit() modifier."""

    @property
    def rule_id(self) -> str:
        return "SUBSTITUTE.CHARACTER_LIMIT"

    @property
    def name(self) -> str:
        return "Character Limit Modifier"

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
        return Substitution(removed=("formatStateUsing", "*Str::limit"), added=("limit",))

    def _plan(self, node: Node, context: RewriteContext) -> tuple[int, NumberLiteral] | None:
        if not context.config.is_component(node) or node.find("limit"):
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
            and isinstance(body.root, ClassRef)
            and body.root.name in STR_CLASSES
            and len(body.calls) == 1
            and body.calls[0].static
            and body.calls[0].name == "limit"
        ):
            return None

        limit_args = body.calls[0].positional()
        if len(limit_args) != 2 or limit_args[0] != Variable(param):
            return None
        length = limit_args[1]
        if not isinstance(length, NumberLiteral) or not length.raw.isdigit():
            return None
        return indexes[0], length

    def matches(self, node: Node, context: RewriteContext) -> bool:
        return self._plan(node, context) is not None

    def rewrite(self, node: Node, context: RewriteContext) -> Node:
        index, length = self._plan(node, context)
        calls = list(node.calls)
        calls[index] = Call("limit", (Argument(length),))
        return node.with_calls(tuple(calls))
