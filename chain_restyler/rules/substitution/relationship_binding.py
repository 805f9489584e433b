"""
Relationship-binding substitution.

Detects a select field whose option list is a plain name/key pluck off a
related model and replaces it with a declarative relationship binding:

    Select::make('author_id')->options(User::pluck('name', 'id'))
    Select::make('author_id')->relationship('author', 'name')

Recognized option sources (exactly these shapes):
- ``Model::pluck('<column>', 'id')``
- ``Model::all()->pluck('<column>', 'id')``
- either of the above wrapped in ``fn () => ...``

Any filtering, sorting or transformation (``where``, ``orderBy``,
``map`` ...) or a key other than ``id`` is not expressible by the
binding call, so the template does not match.
"""

import re

from ...syntax.nodes import (
    Argument,
    Call,
    ChainExpression,
    ClassRef,
    Closure,
    Expression,
    Node,
    StringLiteral,
)
from ..base import RewriteContext, RewriteRule, Substitution
from ..config import StyleConfig

FIELD_NAME_PATTERN = re.compile(r"^([a-z][a-z0-9]*(?:_[a-z0-9]+)*)_id$")


def relation_name(field_name: str, style: str = "camel") -> str | None:
    """Derive the relation name from a foreign-key field name.

    Examples:
        author_id -> author
        parent_category_id -> parentCategory (camel) / parent_category (snake)
    """
    match = FIELD_NAME_PATTERN.match(field_name)
    if not match:
        return None
    base = match.group(1)
    if style == "snake":
        return base
    head, *tail = base.split("_")
    return head + "".join(part.capitalize() for part in tail)


def pluck_column(source: Expression) -> StringLiteral | None:
    """Return the display column if ``source`` is an unfiltered pluck."""
    if isinstance(source, Closure):
        if not source.is_arrow or source.params or source.uses:
            return None
        source = source.body

    if not isinstance(source, ChainExpression) or not isinstance(source.root, ClassRef):
        return None

    calls = source.calls
    if len(calls) == 1 and calls[0].static and calls[0].name == "pluck":
        pluck = calls[0]
    elif (
        len(calls) == 2
        and calls[0].static
        and calls[0].name == "all"
        and calls[0].args == ()
        and not calls[1].static
        and calls[1].name == "pluck"
    ):
        pluck = calls[1]
    else:
        return None

    args = pluck.positional()
    if len(args) != 2 or not all(isinstance(a, StringLiteral) for a in args):
        return None
    column, key = args
    if key.value != "id" or not column.value:
        return None
    return column


class RelationshipBindingRule(RewriteRule):
    """Replace plucked option lists with a relationship binding."""

    @property
    def rule_id(self) -> str:
        return "SUBSTITUTE.RELATIONSHIP_BINDING"

    @property
    def name(self) -> str:
        return "Relationship Binding"

    @property
    def family(self) -> str:
        return "substitution"

    @property
    def target(self) -> type[Node]:
        return ChainExpression

    @property
    def priority(self) -> int:
        return 30

    @property
    def description(self) -> str:
        return (
            "Replaces options(Model::pluck('<column>', 'id')) on a '<relation>_id' "
            "field with relationship('<relation>', '<column>')."
        )

    def substitution(self, config: StyleConfig) -> Substitution:
        return Substitution(
            removed=("options", "*::pluck", "*::all", "pluck"),
            added=("relationship",),
        )

    def _plan(self, node: Node, context: RewriteContext) -> tuple[int, Call] | None:
        """Locate the options call and build its replacement."""
        config = context.config
        if not config.is_component(node) or node.find("relationship"):
            return None

        field_name = node.declared_name
        relation = relation_name(field_name or "", config.relation_name_style)
        if relation is None:
            return None

        indexes = node.find("options")
        if len(indexes) != 1:
            return None
        options = node.calls[indexes[0]].positional()
        if len(options) != 1:
            return None

        column = pluck_column(options[0])
        if column is None:
            return None

        binding = Call(
            "relationship",
            (Argument(StringLiteral.quote(relation)), Argument(column)),
        )
        return indexes[0], binding

    def matches(self, node: Node, context: RewriteContext) -> bool:
        return self._plan(node, context) is not None

    def rewrite(self, node: Node, context: RewriteContext) -> Node:
        index, binding = self._plan(node, context)
        calls = list(node.calls)
        calls[index] = binding
        return node.with_calls(tuple(calls))
