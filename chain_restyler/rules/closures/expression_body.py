"""
Closure-to-expression rule.

Rewrites ``function ($x) { return <expr>; }`` as ``fn ($x) => <expr>``.
Only closures whose body is exactly one ``return`` with a value qualify;
closures with a ``use`` clause or by-reference parameters touch state
beyond their declared parameters and are left alone. The returned
expression may only read the closure's parameters and ``$this``, since an
arrow function would capture any other variable from the enclosing scope.
"""

from collections.abc import Iterator
from dataclasses import replace

from ...syntax.nodes import (
    Closure,
    FunctionCall,
    Node,
    ReturnStatement,
    Variable,
    child_nodes,
)
from ..base import RewriteContext, RewriteRule

ALWAYS_BOUND = frozenset({"this"})


def free_variables(node: Node, bound: frozenset[str] = ALWAYS_BOUND) -> Iterator[str]:
    """Yield variable names read by ``node`` that ``bound`` does not cover."""
    if isinstance(node, Variable):
        if node.name not in bound:
            yield node.name
        return
    if isinstance(node, FunctionCall) and node.name.startswith("$"):
        if node.name[1:] not in bound:
            yield node.name[1:]
    if isinstance(node, Closure):
        for param in node.params:
            if param.default is not None:
                yield from free_variables(param.default, bound)
        if node.is_arrow:
            params = frozenset(param.name for param in node.params)
            yield from free_variables(node.body, bound | params)
        else:
            # A block closure has its own scope and only imports its uses.
            for use in node.uses:
                if use.name not in bound:
                    yield use.name
        return
    for child in child_nodes(node):
        yield from free_variables(child, bound)


class ExpressionBodyRule(RewriteRule):
    """Collapse single-return block closures into arrow functions."""

    @property
    def rule_id(self) -> str:
        return "CLOSURE.EXPRESSION_BODY"

    @property
    def name(self) -> str:
        return "Expression-Bodied Closure"

    @property
    def family(self) -> str:
        return "closures"

    @property
    def target(self) -> type[Node]:
        return Closure

    @property
    def priority(self) -> int:
        return 10

    @property
    def description(self) -> str:
        return (
            "Replaces a block closure whose only statement is "
            "'return <expr>;' with an arrow function returning <expr>."
        )

    def matches(self, node: Node, context: RewriteContext) -> bool:
        if node.is_arrow or node.uses:
            return False
        if any(param.by_ref for param in node.params):
            return False
        statements = node.body.statements
        if not (
            len(statements) == 1
            and isinstance(statements[0], ReturnStatement)
            and statements[0].value is not None
        ):
            return False
        bound = ALWAYS_BOUND | {param.name for param in node.params}
        return next(free_variables(statements[0].value, bound), None) is None

    def rewrite(self, node: Node, context: RewriteContext) -> Node:
        return replace(node, body=node.body.statements[0].value)
