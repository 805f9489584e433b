"""
Chain parser.

Recursive descent over the token list from the lexer. Builds a Fragment
of top-level declarations; every input outside the restricted grammar
raises ChainSyntaxError with the offending position.
"""

from ..errors import ChainSyntaxError
from .lexer import Token, TokenType, tokenize
from .nodes import (
    ArrayItem,
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
    NumberLiteral,
    Param,
    Parenthesized,
    ReturnStatement,
    Statement,
    StringLiteral,
    Ternary,
    UnaryOp,
    UseVar,
    Variable,
)

# Binary operator levels, loosest first. '??' is handled separately (right-assoc).
BINARY_LEVELS: list[tuple[str, ...]] = [
    ("||",),
    ("&&",),
    ("==", "!=", "===", "!==", "<>", "<=>"),
    ("<", ">", "<=", ">="),
    (".",),
    ("+", "-"),
    ("*", "/", "%"),
]

ASSIGN_OPS = ("=", ".=", "+=", "-=", "*=", "/=", "??=")

UNSUPPORTED_KEYWORDS = {
    "new", "match", "clone", "yield", "throw", "include", "require",
    "include_once", "require_once", "print", "echo", "instanceof",
}

CLOSING = {")": "(", "]": "[", "}": "{"}


class Parser:
    """Recursive descent parser for chain fragments."""

    def __init__(self, source: str):
        self.source = source
        self.tokens = tokenize(source)
        self.pos = 0

    # -- token helpers ------------------------------------------------------

    def current(self) -> Token:
        return self.tokens[self.pos]

    def peek(self, offset: int = 1) -> Token:
        index = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def advance(self) -> Token:
        token = self.current()
        if token.type != TokenType.EOF:
            self.pos += 1
        return token

    def error(self, reason: str, token: Token | None = None) -> ChainSyntaxError:
        token = token or self.current()
        return ChainSyntaxError.at(self.source, token.position, reason)

    def unexpected(self, expected: str) -> ChainSyntaxError:
        token = self.current()
        if token.type == TokenType.EOF:
            return self.error(f"expected {expected} but reached end of fragment")
        if token.type == TokenType.OP and token.text in CLOSING:
            return self.error(f"unbalanced closing {token.text!r}")
        return self.error(f"expected {expected}, got {token.text!r}")

    def expect_op(self, text: str) -> Token:
        if not self.current().is_op(text):
            raise self.unexpected(repr(text))
        return self.advance()

    def expect_name(self) -> Token:
        if self.current().type != TokenType.NAME:
            raise self.unexpected("a name")
        return self.advance()

    def accept_op(self, *texts: str) -> Token | None:
        if self.current().is_op(*texts):
            return self.advance()
        return None

    # -- fragment -----------------------------------------------------------

    def parse_fragment(self) -> Fragment:
        if self.current().type == TokenType.EOF:
            raise self.error("empty fragment")

        chains = [self.parse_declaration()]
        separator: str | None = None
        trailing = False

        while self.current().type != TokenType.EOF:
            token = self.current()
            if not token.is_op(",", ";"):
                raise self.unexpected("',' or ';' between declarations")
            if separator is None:
                separator = token.text
            elif token.text != separator:
                raise self.error("mixed ',' and ';' separators")
            self.advance()
            if self.current().type == TokenType.EOF:
                trailing = True
                break
            chains.append(self.parse_declaration())

        return Fragment(tuple(chains), separator or ",", trailing)

    def parse_declaration(self) -> ChainExpression:
        start = self.current()
        expr = self.parse_expression()
        if not isinstance(expr, ChainExpression) or not expr.is_declaration:
            raise self.error(
                "expected a chain rooted at a static constructor call", start
            )
        return expr

    # -- expressions --------------------------------------------------------

    def parse_expression(self) -> Expression:
        return self.parse_ternary()

    def parse_ternary(self) -> Expression:
        condition = self.parse_coalesce()
        if not self.accept_op("?"):
            return condition
        then = None
        if not self.current().is_op(":"):
            then = self.parse_expression()
        self.expect_op(":")
        otherwise = self.parse_coalesce()
        return Ternary(condition, then, otherwise)

    def parse_coalesce(self) -> Expression:
        left = self.parse_binary(0)
        if self.accept_op("??"):
            return BinaryOp("??", left, self.parse_coalesce())
        return left

    def parse_binary(self, level: int) -> Expression:
        if level >= len(BINARY_LEVELS):
            return self.parse_unary()
        left = self.parse_binary(level + 1)
        while self.current().is_op(*BINARY_LEVELS[level]):
            op = self.advance().text
            right = self.parse_binary(level + 1)
            left = BinaryOp(op, left, right)
        return left

    def parse_unary(self) -> Expression:
        token = self.accept_op("!", "-", "+")
        if token:
            return UnaryOp(token.text, self.parse_unary())
        return self.parse_postfix(self.parse_primary())

    def parse_postfix(self, expr: Expression) -> Expression:
        # Invoking a callable variable such as $get('type')
        if isinstance(expr, Variable) and self.current().is_op("("):
            expr = FunctionCall(f"${expr.name}", self.parse_arguments())
        while self.accept_op("->"):
            name = self.expect_name().text
            args = self.parse_arguments() if self.current().is_op("(") else None
            call = Call(name, args)
            if isinstance(expr, ChainExpression):
                expr = expr.with_calls(expr.calls + (call,))
            else:
                expr = ChainExpression(expr, (call,))
        return expr

    def parse_primary(self) -> Expression:
        token = self.current()

        if token.type == TokenType.STRING:
            self.advance()
            return StringLiteral(token.text)
        if token.type == TokenType.NUMBER:
            self.advance()
            return NumberLiteral(token.text)
        if token.type == TokenType.VARIABLE:
            self.advance()
            return Variable(token.text[1:])
        if token.is_op("["):
            return self.parse_array()
        if token.is_op("("):
            self.advance()
            inner = self.parse_expression()
            self.expect_op(")")
            return Parenthesized(inner)
        if token.type == TokenType.NAME:
            return self.parse_name()

        raise self.unexpected("an expression")

    def parse_name(self) -> Expression:
        token = self.current()
        lowered = token.text.lower()

        if lowered in UNSUPPORTED_KEYWORDS:
            raise self.error(f"unsupported keyword {token.text!r}")
        if lowered in ("fn", "function"):
            return self.parse_closure()
        if lowered == "static" and self.peek().is_name("fn", "function"):
            return self.parse_closure()

        self.advance()
        if self.current().is_op("("):
            return FunctionCall(token.text, self.parse_arguments())
        if self.accept_op("::"):
            member = self.current()
            if member.type == TokenType.VARIABLE:
                raise self.error("static properties are not supported", member)
            member_name = self.expect_name().text
            if self.current().is_op("("):
                call = Call(member_name, self.parse_arguments(), static=True)
                return ChainExpression(ClassRef(token.text), (call,))
            return ClassConstant(token.text, member_name)
        return Constant(token.text)

    def parse_arguments(self) -> tuple[Argument, ...]:
        self.expect_op("(")
        args: list[Argument] = []
        while not self.current().is_op(")"):
            name = None
            if self.current().type == TokenType.NAME and self.peek().is_op(":"):
                name = self.advance().text
                self.advance()
            args.append(Argument(self.parse_expression(), name))
            if not self.accept_op(","):
                break
        self.expect_op(")")
        return tuple(args)

    def parse_array(self) -> ArrayLiteral:
        self.expect_op("[")
        items: list[ArrayItem] = []
        while not self.current().is_op("]"):
            first = self.parse_expression()
            if self.accept_op("=>"):
                items.append(ArrayItem(self.parse_expression(), first))
            else:
                items.append(ArrayItem(first))
            if not self.accept_op(","):
                break
        self.expect_op("]")
        return ArrayLiteral(tuple(items))

    # -- closures -----------------------------------------------------------

    def parse_closure(self) -> Closure:
        is_static = False
        if self.current().is_name("static"):
            self.advance()
            is_static = True

        keyword = self.advance().text.lower()
        params = self.parse_params()

        if keyword == "fn":
            return_type = self.parse_return_type()
            self.expect_op("=>")
            return Closure(params, self.parse_expression(), (), is_static, return_type)

        uses: tuple[UseVar, ...] = ()
        if self.current().is_name("use"):
            self.advance()
            uses = self.parse_uses()
        return_type = self.parse_return_type()
        body = self.parse_block()
        return Closure(params, body, uses, is_static, return_type)

    def parse_params(self) -> tuple[Param, ...]:
        self.expect_op("(")
        params: list[Param] = []
        while not self.current().is_op(")"):
            type_hint = None
            if self.current().type == TokenType.NAME or self.current().is_op("?"):
                type_hint = self.parse_type()
            by_ref = self.accept_op("&") is not None
            token = self.current()
            if token.type != TokenType.VARIABLE:
                raise self.unexpected("a parameter variable")
            self.advance()
            default = self.parse_expression() if self.accept_op("=") else None
            params.append(Param(token.text[1:], type_hint, by_ref, default))
            if not self.accept_op(","):
                break
        self.expect_op(")")
        return tuple(params)

    def parse_uses(self) -> tuple[UseVar, ...]:
        self.expect_op("(")
        uses: list[UseVar] = []
        while not self.current().is_op(")"):
            by_ref = self.accept_op("&") is not None
            token = self.current()
            if token.type != TokenType.VARIABLE:
                raise self.unexpected("a captured variable")
            self.advance()
            uses.append(UseVar(token.text[1:], by_ref))
            if not self.accept_op(","):
                break
        self.expect_op(")")
        return tuple(uses)

    def parse_type(self) -> str:
        parts = []
        if self.accept_op("?"):
            parts.append("?")
        parts.append(self.expect_name().text)
        while self.current().is_op("|") and self.peek().type == TokenType.NAME:
            self.advance()
            parts.append("|")
            parts.append(self.advance().text)
        return "".join(parts)

    def parse_return_type(self) -> str | None:
        if self.accept_op(":"):
            return self.parse_type()
        return None

    # -- statements ---------------------------------------------------------

    def parse_block(self) -> Block:
        self.expect_op("{")
        statements: list[Statement] = []
        while not self.current().is_op("}"):
            if self.current().type == TokenType.EOF:
                raise self.unexpected("'}'")
            statements.append(self.parse_statement())
        self.expect_op("}")
        return Block(tuple(statements))

    def parse_statement(self) -> Statement:
        token = self.current()

        if token.is_name("return"):
            self.advance()
            value = None
            if not self.current().is_op(";"):
                value = self.parse_expression()
            self.expect_op(";")
            return ReturnStatement(value)

        if token.is_name("if"):
            self.advance()
            self.expect_op("(")
            condition = self.parse_expression()
            self.expect_op(")")
            then = self.parse_branch()
            otherwise = None
            if self.current().is_name("else"):
                self.advance()
                otherwise = self.parse_branch()
            return IfStatement(condition, then, otherwise)

        expr = self.parse_expression()
        assign = self.accept_op(*ASSIGN_OPS)
        if assign:
            value = self.parse_expression()
            self.expect_op(";")
            return AssignStatement(expr, assign.text, value)
        self.expect_op(";")
        return ExpressionStatement(expr)

    def parse_branch(self) -> Block:
        if self.current().is_op("{"):
            return self.parse_block()
        return Block((self.parse_statement(),))


def parse_fragment(source: str) -> Fragment:
    """Parse a fragment of one or more top-level declarations.

    Args:
        source: Text such as ``Select::make('author_id')->searchable()``.

    Returns:
        The parsed Fragment.

    Raises:
        ChainSyntaxError: If the text is outside the restricted grammar.
    """
    return Parser(source).parse_fragment()


def parse_expression(source: str) -> Expression:
    """Parse a single expression (used by tests and rule templates)."""
    parser = Parser(source)
    expr = parser.parse_expression()
    if parser.current().type != TokenType.EOF:
        raise parser.unexpected("end of expression")
    return expr
