"""Unit tests for chain_restyler.syntax.parser module."""

import pytest

from chain_restyler.errors import ChainSyntaxError
from chain_restyler.syntax.nodes import (
    Argument,
    ArrayItem,
    ArrayLiteral,
    BinaryOp,
    Block,
    Call,
    ChainExpression,
    ClassConstant,
    ClassRef,
    Closure,
    Constant,
    ExpressionStatement,
    FunctionCall,
    IfStatement,
    NumberLiteral,
    Param,
    ReturnStatement,
    StringLiteral,
    Ternary,
    UnaryOp,
    UseVar,
    Variable,
)
from chain_restyler.syntax.parser import parse_expression, parse_fragment


def s(text: str) -> StringLiteral:
    return StringLiteral(f"'{text}'")


def single(source: str) -> ChainExpression:
    fragment = parse_fragment(source)
    assert len(fragment.chains) == 1
    return fragment.chains[0]


class TestDeclarations:
    """Tests for top-level declaration parsing."""

    def test_simple_declaration(self):
        """Test constructor plus one modifier."""
        chain = single("Select::make('author_id')->searchable()")
        assert chain == ChainExpression(
            ClassRef("Select"),
            (
                Call("make", (Argument(s("author_id")),), static=True),
                Call("searchable", ()),
            ),
        )
        assert chain.is_declaration
        assert chain.declared_name == "author_id"

    def test_property_fetch_has_no_arguments(self):
        """Test '->name' without parentheses is a property fetch."""
        chain = single("TextColumn::make('title')->sortable")
        assert chain.calls[1] == Call("sortable", None)
        assert chain.calls[1].is_property

    def test_named_arguments(self):
        """Test 'name: value' arguments keep their name."""
        chain = single("TextInput::make('price')->numeric(decimalPlaces: 2)")
        assert chain.calls[1].args == (Argument(NumberLiteral("2"), "decimalPlaces"),)
        assert chain.calls[1].positional() == ()

    def test_nested_static_chain_argument(self):
        """Test a static call argument becomes its own chain."""
        chain = single("Select::make('author_id')->options(User::all()->pluck('name', 'id'))")
        inner = chain.calls[1].args[0].value
        assert inner == ChainExpression(
            ClassRef("User"),
            (Call("all", (), static=True), Call("pluck", (Argument(s("name")), Argument(s("id"))))),
        )

    def test_comma_separated_fragment(self):
        """Test sibling declarations with a trailing comma."""
        fragment = parse_fragment("TextInput::make('a'),\nTextInput::make('b'),\n")
        assert [c.declared_name for c in fragment.chains] == ["a", "b"]
        assert fragment.separator == ","
        assert fragment.trailing

    def test_semicolon_separated_fragment(self):
        fragment = parse_fragment("TextInput::make('a'); TextInput::make('b')")
        assert fragment.separator == ";"
        assert not fragment.trailing

    def test_callable_variable(self):
        """Test '$get('type')' parses as a call of the variable."""
        expr = parse_expression("$get('type')")
        assert expr == FunctionCall("$get", (Argument(s("type")),))

    def test_nested_expression_chain(self):
        """Test a chain rooted at a variable is not a declaration."""
        expr = parse_expression("$state->format('Y')")
        assert expr == ChainExpression(Variable("state"), (Call("format", (Argument(s("Y")),)),))
        assert not expr.is_declaration


class TestExpressions:
    """Tests for expression parsing and precedence."""

    def test_multiplication_binds_tighter(self):
        expr = parse_expression("1 + 2 * 3")
        assert expr == BinaryOp(
            "+", NumberLiteral("1"), BinaryOp("*", NumberLiteral("2"), NumberLiteral("3"))
        )

    def test_comparison_binds_tighter_than_and(self):
        expr = parse_expression("$a === 'x' && $b")
        assert expr == BinaryOp(
            "&&", BinaryOp("===", Variable("a"), s("x")), Variable("b")
        )

    def test_coalesce_is_right_associative(self):
        expr = parse_expression("$a ?? $b ?? 'c'")
        assert expr == BinaryOp("??", Variable("a"), BinaryOp("??", Variable("b"), s("c")))

    def test_ternary_and_short_ternary(self):
        assert parse_expression("$a ? 1 : 2") == Ternary(
            Variable("a"), NumberLiteral("1"), NumberLiteral("2")
        )
        assert parse_expression("$a ?: 2") == Ternary(Variable("a"), None, NumberLiteral("2"))

    def test_negation_of_call(self):
        expr = parse_expression("! confirm('Sure?')")
        assert expr == UnaryOp("!", FunctionCall("confirm", (Argument(s("Sure?")),)))

    def test_constants_and_class_constants(self):
        assert parse_expression("true") == Constant("true")
        assert parse_expression("Status::class") == ClassConstant("Status", "class")

    def test_keyed_array(self):
        expr = parse_expression("['draft' => 'Draft', 'published' => 'Published']")
        assert expr == ArrayLiteral(
            (
                ArrayItem(s("Draft"), s("draft")),
                ArrayItem(s("Published"), s("published")),
            )
        )

    def test_trailing_input_is_rejected(self):
        with pytest.raises(ChainSyntaxError):
            parse_expression("$a $b")


class TestClosures:
    """Tests for closure parsing."""

    def test_arrow_function(self):
        expr = parse_expression("fn (Get $get): bool => $get('type') === 'business'")
        assert expr == Closure(
            (Param("get", "Get"),),
            BinaryOp("===", FunctionCall("$get", (Argument(s("type")),)), s("business")),
            return_type="bool",
        )
        assert expr.is_arrow

    def test_block_closure_with_use_clause(self):
        expr = parse_expression("static function (?string $state) use (&$total) { $total = 1; return $state; }")
        assert isinstance(expr, Closure)
        assert expr.static
        assert expr.params == (Param("state", "?string"),)
        assert expr.uses == (UseVar("total", True),)
        assert isinstance(expr.body, Block)
        assert expr.body.statements[1] == ReturnStatement(Variable("state"))

    def test_parameter_defaults_and_references(self):
        expr = parse_expression("fn (&$items, $limit = 10) => $limit")
        assert expr.params == (
            Param("items", None, True),
            Param("limit", None, False, NumberLiteral("10")),
        )

    def test_if_statement_without_braces(self):
        """Test a braceless branch is normalized into a block."""
        expr = parse_expression("function ($record) { if (! $record) return; $record->touch(); }")
        guard, rest = expr.body.statements
        assert guard == IfStatement(
            UnaryOp("!", Variable("record")), Block((ReturnStatement(None),))
        )
        assert isinstance(rest, ExpressionStatement)


class TestSyntaxErrors:
    """Tests for ChainSyntaxError reporting."""

    def test_unbalanced_closing_parenthesis(self):
        """Test a stray ')' is reported at its position."""
        source = "Select::make('x'))"
        with pytest.raises(ChainSyntaxError) as exc_info:
            parse_fragment(source)
        error = exc_info.value
        assert error.reason == "unbalanced closing ')'"
        assert error.position == 17
        assert (error.line, error.column) == (1, 18)

    def test_unclosed_parenthesis(self):
        with pytest.raises(ChainSyntaxError) as exc_info:
            parse_fragment("Select::make('x'")
        assert exc_info.value.reason == "expected ')' but reached end of fragment"

    @pytest.mark.parametrize("source", ["", "   \n  "])
    def test_empty_fragment(self, source):
        with pytest.raises(ChainSyntaxError) as exc_info:
            parse_fragment(source)
        assert exc_info.value.reason == "empty fragment"

    def test_fragment_must_start_with_static_constructor(self):
        with pytest.raises(ChainSyntaxError) as exc_info:
            parse_fragment("$form->schema([])")
        assert "static constructor" in exc_info.value.reason

    def test_mixed_separators(self):
        with pytest.raises(ChainSyntaxError) as exc_info:
            parse_fragment("A::make('a'), B::make('b'); C::make('c')")
        assert exc_info.value.reason == "mixed ',' and ';' separators"

    @pytest.mark.parametrize(
        "source, keyword",
        [
            ("Select::make('x')->default(new Collection())", "new"),
            ("Select::make('x')->default(match ($a) {})", "match"),
        ],
    )
    def test_unsupported_keywords(self, source, keyword):
        with pytest.raises(ChainSyntaxError) as exc_info:
            parse_fragment(source)
        assert exc_info.value.reason == f"unsupported keyword {keyword!r}"

    def test_static_property_rejected(self):
        with pytest.raises(ChainSyntaxError):
            parse_fragment("Select::make(Config::$name)")
