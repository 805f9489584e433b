"""
Emitter: serializes a Fragment back to canonical chain text.

Layout rules:
- a declaration puts its constructor on the first line and every further
  call on its own line, indented one level deeper;
- arrays holding declarations are written one item per line with a
  trailing comma;
- arrow closures stay inline, block closures get one statement per line.

Output depends only on the AST, and ``parse_fragment(emit_fragment(f))``
reproduces ``f``.
"""

from .nodes import (
    ArrayLiteral,
    Argument,
    AssignStatement,
    BinaryOp,
    Block,
    Call,
    ChainExpression,
    ClassConstant,
    ClassRef,
    Closure,
    Constant,
    Expression,
    ExpressionStatement,
    Fragment,
    FunctionCall,
    IfStatement,
    Node,
    NumberLiteral,
    Param,
    Parenthesized,
    ReturnStatement,
    Statement,
    StringLiteral,
    Ternary,
    UnaryOp,
    Variable,
)

INDENT = "    "


def emit_fragment(fragment: Fragment) -> str:
    """Serialize a fragment; the result always ends with a newline."""
    separator = fragment.separator
    text = f"{separator}\n".join(
        _emit_declaration(chain, 0) for chain in fragment.chains
    )
    if fragment.trailing:
        text += separator
    return text + "\n"


def emit_node(node: Node, level: int = 0) -> str:
    """Serialize any expression or statement node (used in messages and tests)."""
    if isinstance(node, Fragment):
        return emit_fragment(node)
    if isinstance(node, (ReturnStatement, ExpressionStatement, AssignStatement, IfStatement)):
        return _statement(node, level)
    if isinstance(node, ChainExpression) and node.is_declaration:
        return _emit_declaration(node, level)
    if isinstance(node, Call):
        return _segment(node, level)
    return _expr(node, level)


def _emit_declaration(chain: ChainExpression, level: int) -> str:
    head, *rest = chain.calls
    lines = [_root(chain.root, level) + _segment(head, level)]
    for call in rest:
        lines.append(INDENT * (level + 1) + _segment(call, level + 1))
    return "\n".join(lines)


def _root(root: Expression, level: int) -> str:
    if isinstance(root, ClassRef):
        return root.name
    return _expr(root, level)


def _segment(call: Call, level: int) -> str:
    prefix = "::" if call.static else "->"
    if call.args is None:
        return f"{prefix}{call.name}"
    return f"{prefix}{call.name}({_arguments(call.args, level)})"


def _arguments(args: tuple[Argument, ...], level: int) -> str:
    parts = []
    for arg in args:
        value = _expr(arg.value, level)
        parts.append(f"{arg.name}: {value}" if arg.name else value)
    return ", ".join(parts)


def _expr(node: Expression, level: int) -> str:
    if isinstance(node, (StringLiteral, NumberLiteral)):
        return node.raw
    if isinstance(node, Constant):
        return node.name
    if isinstance(node, ClassRef):
        return node.name
    if isinstance(node, ClassConstant):
        return f"{node.class_name}::{node.name}"
    if isinstance(node, Variable):
        return f"${node.name}"
    if isinstance(node, FunctionCall):
        return f"{node.name}({_arguments(node.args, level)})"
    if isinstance(node, ChainExpression):
        return _root(node.root, level) + "".join(
            _segment(call, level) for call in node.calls
        )
    if isinstance(node, ArrayLiteral):
        return _array(node, level)
    if isinstance(node, Closure):
        return _closure(node, level)
    if isinstance(node, BinaryOp):
        return f"{_expr(node.left, level)} {node.op} {_expr(node.right, level)}"
    if isinstance(node, UnaryOp):
        operand = _expr(node.operand, level)
        if operand.startswith(node.op):
            return f"{node.op} {operand}"
        return f"{node.op}{operand}"
    if isinstance(node, Ternary):
        condition = _expr(node.condition, level)
        otherwise = _expr(node.otherwise, level)
        if node.then is None:
            return f"{condition} ?: {otherwise}"
        return f"{condition} ? {_expr(node.then, level)} : {otherwise}"
    if isinstance(node, Parenthesized):
        return f"({_expr(node.expr, level)})"
    raise TypeError(f"Cannot emit node of type {type(node).__name__}")


def _array(node: ArrayLiteral, level: int) -> str:
    if not node.items:
        return "[]"

    multiline = any(
        isinstance(item.value, ChainExpression) and item.value.is_declaration
        for item in node.items
    )
    if not multiline:
        return "[" + ", ".join(_item(item, level) for item in node.items) + "]"

    lines = ["["]
    for item in node.items:
        lines.append(INDENT * (level + 1) + _item(item, level + 1) + ",")
    lines.append(INDENT * level + "]")
    return "\n".join(lines)


def _item(item, level: int) -> str:
    value = item.value
    if isinstance(value, ChainExpression) and value.is_declaration:
        text = _emit_declaration(value, level)
    else:
        text = _expr(value, level)
    if item.key is not None:
        return f"{_expr(item.key, level)} => {text}"
    return text


def _param(param: Param, level: int) -> str:
    text = f"{'&' if param.by_ref else ''}${param.name}"
    if param.type_hint:
        text = f"{param.type_hint} {text}"
    if param.default is not None:
        text = f"{text} = {_expr(param.default, level)}"
    return text


def _closure(node: Closure, level: int) -> str:
    params = ", ".join(_param(p, level) for p in node.params)
    prefix = "static " if node.static else ""
    return_type = f": {node.return_type}" if node.return_type else ""

    if node.is_arrow:
        return f"{prefix}fn ({params}){return_type} => {_expr(node.body, level)}"

    uses = ""
    if node.uses:
        names = ", ".join(f"{'&' if u.by_ref else ''}${u.name}" for u in node.uses)
        uses = f" use ({names})"
    return f"{prefix}function ({params}){uses}{return_type} {_block(node.body, level)}"


def _block(block: Block, level: int) -> str:
    if not block.statements:
        return "{}"
    lines = ["{"]
    for statement in block.statements:
        lines.append(INDENT * (level + 1) + _statement(statement, level + 1))
    lines.append(INDENT * level + "}")
    return "\n".join(lines)


def _statement(node: Statement, level: int) -> str:
    if isinstance(node, ReturnStatement):
        if node.value is None:
            return "return;"
        return f"return {_expr(node.value, level)};"
    if isinstance(node, ExpressionStatement):
        return f"{_expr(node.expr, level)};"
    if isinstance(node, AssignStatement):
        return f"{_expr(node.target, level)} {node.op} {_expr(node.value, level)};"
    if isinstance(node, IfStatement):
        text = f"if ({_expr(node.condition, level)}) {_block(node.then, level)}"
        if node.otherwise is not None:
            text += f" else {_block(node.otherwise, level)}"
        return text
    raise TypeError(f"Cannot emit statement of type {type(node).__name__}")
