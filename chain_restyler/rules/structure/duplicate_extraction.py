"""
Duplicate extraction rule (advisory).

Flags groups of sibling declarations that are identical except for the
leading name literal of their constructor, e.g.

    TextInput::make('first_name')->required()->maxLength(255),
    TextInput::make('last_name')->required()->maxLength(255),
    TextInput::make('nickname')->required()->maxLength(255),

Whether such a group should become a shared helper is a judgment call,
so the rule only reports it and never changes the tree.
"""

from dataclasses import replace

from ...syntax.nodes import (
    Argument,
    ArrayLiteral,
    ChainExpression,
    Fragment,
    Node,
    StringLiteral,
)
from ..base import AdvisoryRule, RewriteContext
from .siblings import sibling_declarations

NAME_PLACEHOLDER = StringLiteral("''")


def name_blind(chain: ChainExpression) -> ChainExpression:
    """``chain`` with its constructor's name literal replaced by a placeholder."""
    constructor = chain.calls[0]
    args = (Argument(NAME_PLACEHOLDER), *constructor.args[1:])
    return chain.with_calls((replace(constructor, args=args), *chain.calls[1:]))


class DuplicateExtractionRule(AdvisoryRule):
    """Report near-identical sibling declarations."""

    @property
    def rule_id(self) -> str:
        return "STRUCTURE.DUPLICATE_EXTRACTION"

    @property
    def name(self) -> str:
        return "Duplicate Extraction"

    @property
    def family(self) -> str:
        return "structure"

    @property
    def target(self) -> tuple[type[Node], ...]:
        return (Fragment, ArrayLiteral)

    @property
    def priority(self) -> int:
        return 50

    @property
    def description(self) -> str:
        return (
            "Flags min_duplicates or more sibling declarations that differ only "
            "in their name literal. Advisory only."
        )

    def advise(self, node: Node, context: RewriteContext) -> list[str]:
        groups: dict[ChainExpression, list[str]] = {}
        for _, chain in sibling_declarations(node):
            # A bare constructor is not worth extracting.
            if chain.declared_name is None or len(chain.calls) < 2:
                continue
            groups.setdefault(name_blind(chain), []).append(chain.declared_name)

        messages = []
        for names in groups.values():
            if len(names) >= context.config.min_duplicates:
                listed = ", ".join(f"'{name}'" for name in names)
                messages.append(
                    f"{len(names)} declarations differ only by name ({listed}); "
                    "consider extracting a shared definition"
                )
        return messages
