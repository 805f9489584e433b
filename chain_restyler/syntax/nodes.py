"""
AST node types for chained-call fragments.

All nodes are frozen dataclasses: rewrites build new nodes and never
mutate shared ones. Literal nodes keep their raw source text, so two
nodes compare equal only when they are structurally identical down to
the bytes of their literals.
"""

from collections.abc import Iterator
from dataclasses import dataclass, fields, replace
from typing import Any, Union


@dataclass(frozen=True)
class Node:
    """Base class for every AST node."""


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StringLiteral(Node):
    """A quoted string, kept exactly as written (quotes included)."""

    raw: str

    @property
    def value(self) -> str:
        """The unquoted text. Only single-quote escapes are interpreted."""
        body = self.raw[1:-1]
        if self.raw.startswith("'"):
            return body.replace("\\'", "'").replace("\\\\", "\\")
        return body

    @classmethod
    def quote(cls, text: str) -> "StringLiteral":
        """Create a single-quoted literal for ``text``."""
        escaped = text.replace("\\", "\\\\").replace("'", "\\'")
        return cls(f"'{escaped}'")


@dataclass(frozen=True)
class NumberLiteral(Node):
    raw: str


@dataclass(frozen=True)
class Constant(Node):
    """A bare name such as ``true``, ``null`` or ``PHP_EOL``."""

    name: str


@dataclass(frozen=True)
class ClassConstant(Node):
    """``Name::CONSTANT`` or ``Name::class``."""

    class_name: str
    name: str


@dataclass(frozen=True)
class ClassRef(Node):
    """The class a static call is made on (``Select`` in ``Select::make()``)."""

    name: str


@dataclass(frozen=True)
class Variable(Node):
    """``$name``; ``name`` excludes the dollar sign."""

    name: str


@dataclass(frozen=True)
class Argument(Node):
    """A call argument, optionally named (``decimalPlaces: 2``)."""

    value: "Expression"
    name: str | None = None


@dataclass(frozen=True)
class FunctionCall(Node):
    name: str
    args: tuple[Argument, ...] = ()


@dataclass(frozen=True)
class Call(Node):
    """One segment of a chain.

    ``static`` marks ``Receiver::name(...)``. ``args is None`` marks a
    property fetch (``->name`` without parentheses).
    """

    name: str
    args: tuple[Argument, ...] | None = ()
    static: bool = False

    @property
    def has_closure_arg(self) -> bool:
        return any(isinstance(arg.value, Closure) for arg in self.args or ())

    @property
    def is_property(self) -> bool:
        return self.args is None

    def positional(self) -> tuple["Expression", ...]:
        """Argument values, or an empty tuple if any argument is named."""
        if not self.args or any(arg.name is not None for arg in self.args):
            return ()
        return tuple(arg.value for arg in self.args)


@dataclass(frozen=True)
class ChainExpression(Node):
    """A receiver followed by one or more calls.

    A declaration is rooted at a ``ClassRef`` whose first call is the
    static constructor (``TextInput::make('email')``). Nested expression
    chains such as ``$state->format('Y')`` reuse this node with a
    non-class root.
    """

    root: "Expression"
    calls: tuple[Call, ...]

    @property
    def is_declaration(self) -> bool:
        return (
            isinstance(self.root, ClassRef)
            and bool(self.calls)
            and self.calls[0].static
        )

    @property
    def constructor(self) -> Call | None:
        return self.calls[0] if self.is_declaration else None

    @property
    def declared_name(self) -> str | None:
        """The leading string literal passed to the constructor, if any."""
        constructor = self.constructor
        if constructor is None or not constructor.args:
            return None
        first = constructor.args[0]
        if first.name is None and isinstance(first.value, StringLiteral):
            return first.value.value
        return None

    def find(self, name: str) -> list[int]:
        """Indexes of the non-static calls named ``name``."""
        return [
            index
            for index, call in enumerate(self.calls)
            if call.name == name and not call.static
        ]

    def with_calls(self, calls: tuple[Call, ...]) -> "ChainExpression":
        return replace(self, calls=tuple(calls))


@dataclass(frozen=True)
class ArrayItem(Node):
    value: "Expression"
    key: Union["Expression", None] = None


@dataclass(frozen=True)
class ArrayLiteral(Node):
    items: tuple[ArrayItem, ...] = ()


@dataclass(frozen=True)
class Param(Node):
    name: str
    type_hint: str | None = None
    by_ref: bool = False
    default: Union["Expression", None] = None


@dataclass(frozen=True)
class UseVar(Node):
    name: str
    by_ref: bool = False


@dataclass(frozen=True)
class Block(Node):
    statements: tuple["Statement", ...] = ()


@dataclass(frozen=True)
class Closure(Node):
    """``fn (...) => expr`` when ``body`` is an expression, else a block closure."""

    params: tuple[Param, ...]
    body: Union["Expression", Block]
    uses: tuple[UseVar, ...] = ()
    static: bool = False
    return_type: str | None = None

    @property
    def is_arrow(self) -> bool:
        return not isinstance(self.body, Block)


@dataclass(frozen=True)
class BinaryOp(Node):
    op: str
    left: "Expression"
    right: "Expression"


@dataclass(frozen=True)
class UnaryOp(Node):
    op: str
    operand: "Expression"


@dataclass(frozen=True)
class Ternary(Node):
    """``condition ? then : otherwise``; ``then`` is None for ``?:``."""

    condition: "Expression"
    then: Union["Expression", None]
    otherwise: "Expression"


@dataclass(frozen=True)
class Parenthesized(Node):
    expr: "Expression"


Expression = Union[
    StringLiteral,
    NumberLiteral,
    Constant,
    ClassConstant,
    ClassRef,
    Variable,
    FunctionCall,
    ChainExpression,
    ArrayLiteral,
    Closure,
    BinaryOp,
    UnaryOp,
    Ternary,
    Parenthesized,
]


# ---------------------------------------------------------------------------
# Statements (closure block bodies only)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReturnStatement(Node):
    value: Expression | None = None


@dataclass(frozen=True)
class ExpressionStatement(Node):
    expr: Expression


@dataclass(frozen=True)
class AssignStatement(Node):
    target: Expression
    op: str
    value: Expression


@dataclass(frozen=True)
class IfStatement(Node):
    condition: Expression
    then: Block
    otherwise: Block | None = None


Statement = Union[ReturnStatement, ExpressionStatement, AssignStatement, IfStatement]


# ---------------------------------------------------------------------------
# Fragment
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Fragment(Node):
    """Top-level sibling declarations separated by ``,`` or ``;``."""

    chains: tuple[ChainExpression, ...]
    separator: str = ","
    trailing: bool = False


# ---------------------------------------------------------------------------
# Traversal helpers
# ---------------------------------------------------------------------------


def child_nodes(node: Node) -> Iterator[Node]:
    """Yield direct children in field order."""
    for f in fields(node):
        value = getattr(node, f.name)
        if isinstance(value, Node):
            yield value
        elif isinstance(value, tuple):
            for item in value:
                if isinstance(item, Node):
                    yield item


def walk(node: Node) -> Iterator[Node]:
    """Depth-first pre-order iteration over ``node`` and its descendants."""
    yield node
    for child in child_nodes(node):
        yield from walk(child)


def map_children(node: Node, fn: Any) -> Node:
    """Return ``node`` with ``fn`` applied to each direct child.

    The original object is returned when no child changed.
    """
    changes: dict[str, Any] = {}
    for f in fields(node):
        value = getattr(node, f.name)
        if isinstance(value, Node):
            new_value = fn(value)
            if new_value is not value:
                changes[f.name] = new_value
        elif isinstance(value, tuple) and any(isinstance(v, Node) for v in value):
            new_items = tuple(fn(v) if isinstance(v, Node) else v for v in value)
            if any(a is not b for a, b in zip(new_items, value, strict=True)):
                changes[f.name] = new_items
    return replace(node, **changes) if changes else node
