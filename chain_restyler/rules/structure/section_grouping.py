"""
Section grouping rule.

Wraps configured clusters of sibling fields in a grouping construct.
With a configured group ``{"title": "Address", "prefix": "address_"}``:

    TextInput::make('address_street'),
    TextInput::make('address_city'),

becomes

    Section::make('Address')
        ->schema([
            TextInput::make('address_street'),
            TextInput::make('address_city'),
        ]),

The section takes the position of the first matching field. Without
configured groups the rule never matches.
"""

from ...syntax.nodes import (
    Argument,
    ArrayItem,
    ArrayLiteral,
    Call,
    ChainExpression,
    ClassRef,
    Fragment,
    Node,
    StringLiteral,
)
from ..base import RewriteContext, RewriteRule, Substitution
from ..config import SectionGroup, StyleConfig
from .siblings import replace_siblings, sibling_declarations


def build_section(group: SectionGroup, fields: list[ChainExpression]) -> ChainExpression:
    """``<construct>::make('<title>')->schema([...fields])``."""
    return ChainExpression(
        ClassRef(group.construct),
        (
            Call("make", (Argument(StringLiteral.quote(group.title)),), static=True),
            Call(
                "schema",
                (Argument(ArrayLiteral(tuple(ArrayItem(f) for f in fields))),),
            ),
        ),
    )


def is_section(chain: ChainExpression, group: SectionGroup) -> bool:
    return (
        chain.is_declaration
        and chain.root == ClassRef(group.construct)
        and chain.declared_name == group.title
    )


class SectionGroupingRule(RewriteRule):
    """Group configured field clusters into sections."""

    @property
    def rule_id(self) -> str:
        return "STRUCTURE.SECTION_GROUPING"

    @property
    def name(self) -> str:
        return "Section Grouping"

    @property
    def family(self) -> str:
        return "structure"

    @property
    def target(self) -> tuple[type[Node], ...]:
        return (Fragment, ArrayLiteral)

    @property
    def priority(self) -> int:
        return 40

    @property
    def description(self) -> str:
        return (
            "Wraps at least min_fields sibling declarations whose names match a "
            "configured section group in <construct>::make('<title>')->schema([...])."
        )

    def substitution(self, config: StyleConfig) -> Substitution:
        added = [f"{group.construct}::make" for group in config.section_groups]
        return Substitution(added=(*added, "schema"))

    def _plan(
        self, node: Node, context: RewriteContext
    ) -> dict[int, ChainExpression | None]:
        """Map sibling positions to their replacement for every group that applies.

        Groups are applied in configuration order; a field claimed by an
        earlier group is not offered to later ones.
        """
        groups = context.config.section_groups
        if not groups:
            return {}

        enclosing = context.enclosing_declarations()
        siblings = [
            (index, chain)
            for index, chain in sibling_declarations(node)
            if context.config.is_component(chain)
            and not any(is_section(chain, group) for group in groups)
        ]

        replacements: dict[int, ChainExpression | None] = {}
        for group in groups:
            if any(is_section(outer, group) for outer in enclosing):
                continue
            matched = [
                (index, chain)
                for index, chain in siblings
                if index not in replacements and group.matches_name(chain.declared_name)
            ]
            if len(matched) < group.min_fields:
                continue

            first, *rest = (index for index, _ in matched)
            replacements[first] = build_section(group, [chain for _, chain in matched])
            for index in rest:
                replacements[index] = None

        return replacements

    def matches(self, node: Node, context: RewriteContext) -> bool:
        return bool(self._plan(node, context))

    def rewrite(self, node: Node, context: RewriteContext) -> Node:
        return replace_siblings(node, self._plan(node, context))
