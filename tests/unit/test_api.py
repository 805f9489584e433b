"""Unit tests for the public apply() entry point."""

import pytest

from chain_restyler import RewriteResult, apply, get_default_catalog
from chain_restyler.rules.base import WarningKind
from chain_restyler.rules.config import StyleConfig
from chain_restyler.rules.equivalence import call_effects
from chain_restyler.syntax.parser import parse_fragment


class TestScenarios:
    """End-to-end restyling of representative fragments."""

    def test_relationship_binding(self, fragments):
        result = apply(fragments["relationship"])
        assert result.text == (
            "Select::make('author_id')\n"
            "    ->relationship('author', 'name')\n"
            "    ->searchable()\n"
        )
        assert result.applied_rule_ids == ["SUBSTITUTE.RELATIONSHIP_BINDING"]
        assert result.changed
        assert result.ok

    def test_closure_to_expression(self, fragments):
        result = apply(fragments["closure"])
        assert result.text == (
            "TextInput::make('company')\n"
            "    ->required(fn (Get $get) => $get('type') === 'business')\n"
        )
        assert result.applied_rule_ids == ["CLOSURE.EXPRESSION_BODY"]

    def test_category_ordering(self, fragments):
        result = apply(fragments["unordered"])
        assert result.text == (
            "TextInput::make('email')\n"
            "    ->id('email-input')\n"
            "    ->label('Email')\n"
            "    ->required()\n"
        )
        assert result.applied_rule_ids == ["ORDER.CATEGORY_SORT"]

    def test_duplicates_are_only_flagged(self, fragments):
        """Test the advisory rule warns without touching the text."""
        result = apply(fragments["duplicate"])
        assert result.text == fragments["duplicate"]
        assert not result.changed
        assert result.applied_rule_ids == []
        assert [w.kind for w in result.warnings] == [WarningKind.ADVISORY]
        assert "'first_name', 'last_name', 'nickname'" in result.warnings[0].message

    def test_syntax_error_leaves_text_untouched(self, fragments):
        result = apply(fragments["unbalanced"])
        assert result.text == fragments["unbalanced"]
        assert not result.ok
        assert not result.changed
        assert result.applied_rule_ids == []
        assert result.syntax_error.line == 1
        assert result.to_dict()["syntax_error"]["column"] == result.syntax_error.column

    def test_confirmation_guard(self, fragments):
        result = apply(fragments["confirm"])
        assert result.text == (
            "Action::make('delete')\n"
            "    ->modalDescription('Delete this post?')\n"
            "    ->requiresConfirmation()\n"
            "    ->action(function ($record) {\n"
            "        $record->delete();\n"
            "    })\n"
        )
        assert result.applied_rule_ids == [
            "SUBSTITUTE.CONFIRMATION_MODIFIER",
            "ORDER.CATEGORY_SORT",
        ]

    def test_date_and_limit_modifiers(self):
        result = apply(
            "TextColumn::make('published_at')"
            "->formatStateUsing(fn ($state) => $state->format('M j, Y'))->sortable(),"
            "TextColumn::make('title')"
            "->formatStateUsing(fn ($state) => Str::limit($state, 50))"
        )
        assert result.text == (
            "TextColumn::make('published_at')\n"
            "    ->date('M j, Y')\n"
            "    ->sortable(),\n"
            "TextColumn::make('title')\n"
            "    ->limit(50)\n"
        )

    def test_section_grouping_with_config(self, address_config):
        source = (
            "TextInput::make('name'), TextInput::make('address_street'), "
            "TextInput::make('address_city')"
        )
        result = apply(source, config=address_config)
        assert result.text == (
            "TextInput::make('name'),\n"
            "Section::make('Address')\n"
            "    ->schema([\n"
            "        TextInput::make('address_street'),\n"
            "        TextInput::make('address_city'),\n"
            "    ])\n"
        )
        assert result.applied_rule_ids == ["STRUCTURE.SECTION_GROUPING"]

    def test_section_grouping_beside_nested_schema(self, address_config):
        source = (
            "Repeater::make('items')->schema([TextInput::make('sku')]), "
            "TextInput::make('address_street'), TextInput::make('address_city')"
        )
        result = apply(source, config=address_config)
        assert result.text == (
            "Repeater::make('items')\n"
            "    ->schema([\n"
            "        TextInput::make('sku'),\n"
            "    ]),\n"
            "Section::make('Address')\n"
            "    ->schema([\n"
            "        TextInput::make('address_street'),\n"
            "        TextInput::make('address_city'),\n"
            "    ])\n"
        )
        assert result.applied_rule_ids == ["STRUCTURE.SECTION_GROUPING"]
        assert result.warnings == []

    def test_date_modifier_beside_other_format_call(self):
        result = apply(
            "TextColumn::make('published_at')"
            "->formatStateUsing(fn ($state) => $state->format('M j, Y'))"
            "->description(fn ($record) => $record->created_at->format('Y'))"
        )
        assert result.applied_rule_ids == ["SUBSTITUTE.DATE_FORMAT", "ORDER.CATEGORY_SORT"]
        assert "->date('M j, Y')" in result.text
        assert "formatStateUsing" not in result.text
        assert result.rejected_rule_ids == set()

    def test_closure_reading_outer_variable_is_kept(self):
        """Test a block closure is not turned into a capturing arrow function."""
        source = "TextInput::make('a')->required(function ($state) { return $record->active; })"
        result = apply(source)
        assert result.text == source
        assert result.applied_rule_ids == []

    def test_disabled_rule_does_not_run(self, fragments):
        config = StyleConfig(disabled_rules=["ORDER.CATEGORY_SORT"])
        result = apply(fragments["unordered"], config=config)
        assert result.text == fragments["unordered"]

    def test_unchanged_input_is_returned_verbatim(self):
        """Test already-styled input keeps its original layout."""
        source = "TextInput::make('a')->label('A')->required()"
        assert apply(source).text == source


ALL_SOURCES = ["relationship", "closure", "unordered", "duplicate", "confirm"]


class TestProperties:
    """Properties every restyled fragment satisfies."""

    @pytest.mark.parametrize("name", ALL_SOURCES)
    def test_idempotent(self, fragments, name):
        once = apply(fragments[name])
        twice = apply(once.text)
        assert twice.text == once.text
        assert twice.applied_rule_ids == []

    @pytest.mark.parametrize("name", ALL_SOURCES)
    def test_deterministic(self, fragments, name):
        first = apply(fragments[name])
        second = apply(fragments[name])
        assert first.text == second.text
        assert first.applied_rule_ids == second.applied_rule_ids

    @pytest.mark.parametrize("name", ALL_SOURCES)
    def test_output_is_category_ordered(self, fragments, name):
        config = StyleConfig()
        for chain in parse_fragment(apply(fragments[name]).text).chains:
            ranks = [
                config.rank(config.category_of(call.name))
                for call in chain.calls[1:]
                if not config.is_exempt(call.name)
            ]
            assert ranks == sorted(ranks)

    def test_reordering_preserves_calls(self, fragments):
        """Test a pure reorder keeps the multiset of calls and arguments."""
        before = parse_fragment(fragments["unordered"])
        after = parse_fragment(apply(fragments["unordered"]).text)
        assert sorted(map(repr, call_effects(before))) == sorted(map(repr, call_effects(after)))


class TestApiSurface:
    """Tests for catalog defaults and result serialization."""

    def test_default_catalog_is_shared(self):
        assert get_default_catalog() is get_default_catalog()

    def test_explicit_pass_cap(self, fragments):
        result = apply(fragments["confirm"], max_passes=1)
        assert result.passes == 1
        assert WarningKind.PASS_LIMIT_EXCEEDED in [w.kind for w in result.warnings]

    def test_pass_cap_reached_at_fixpoint(self, fragments):
        """Test no pass-limit warning when the capped result needs no more work."""
        result = apply(fragments["relationship"], max_passes=1)
        assert result.passes == 1
        assert result.applied_rule_ids == ["SUBSTITUTE.RELATIONSHIP_BINDING"]
        assert result.warnings == []

    def test_to_dict(self, fragments):
        data = apply(fragments["relationship"]).to_dict()
        assert data["changed"] is True
        assert data["applied_rule_ids"] == ["SUBSTITUTE.RELATIONSHIP_BINDING"]
        assert data["syntax_error"] is None
        assert data["passes"] == 2

    def test_result_changed_compares_text(self):
        assert not RewriteResult(text="a", original="a").changed
        assert RewriteResult(text="b", original="a").changed
