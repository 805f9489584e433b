"""Access to the sibling declarations of a fragment or array literal."""

from ...syntax.nodes import (
    ArrayItem,
    ArrayLiteral,
    ChainExpression,
    Fragment,
    Node,
)


def sibling_declarations(node: Node) -> list[tuple[int, ChainExpression]]:
    """Declarations directly under ``node`` with their positions.

    For a fragment every chain counts. For an array literal only unkeyed
    items whose value is a declaration count.
    """
    if isinstance(node, Fragment):
        return list(enumerate(node.chains))
    if isinstance(node, ArrayLiteral):
        return [
            (index, item.value)
            for index, item in enumerate(node.items)
            if item.key is None
            and isinstance(item.value, ChainExpression)
            and item.value.is_declaration
        ]
    return []


def replace_siblings(
    node: Node, replacements: dict[int, ChainExpression | None]
) -> Node:
    """Rebuild ``node`` with the sibling at each index replaced or dropped.

    A replacement of None removes that sibling.
    """
    if isinstance(node, Fragment):
        chains = []
        for index, chain in enumerate(node.chains):
            new = replacements.get(index, chain)
            if new is not None:
                chains.append(new)
        return Fragment(tuple(chains), node.separator, node.trailing)

    items = []
    for index, item in enumerate(node.items):
        if index not in replacements:
            items.append(item)
        elif replacements[index] is not None:
            items.append(ArrayItem(replacements[index]))
    return ArrayLiteral(tuple(items))
