"""Unit tests for the structural rules (section grouping, duplicate extraction)."""

from chain_restyler.rules.base import RewriteContext
from chain_restyler.rules.config import SectionGroup, StyleConfig
from chain_restyler.rules.equivalence import EquivalenceChecker
from chain_restyler.rules.structure.duplicate_extraction import (
    DuplicateExtractionRule,
    name_blind,
)
from chain_restyler.rules.structure.section_grouping import (
    SectionGroupingRule,
    build_section,
    is_section,
)
from chain_restyler.rules.structure.siblings import replace_siblings, sibling_declarations
from chain_restyler.syntax.emitter import emit_fragment
from chain_restyler.syntax.parser import parse_expression, parse_fragment

ADDRESS_FIELDS = (
    "TextInput::make('name'),"
    "TextInput::make('address_street'),"
    "TextInput::make('email'),"
    "TextInput::make('address_city')"
)


class TestSiblings:
    """Tests for sibling_declarations() and replace_siblings()."""

    def test_fragment_siblings(self):
        fragment = parse_fragment("A::make('a'), B::make('b')")
        assert [i for i, _ in sibling_declarations(fragment)] == [0, 1]

    def test_array_siblings_skip_keyed_and_plain_items(self):
        array = parse_expression("[A::make('a'), 'k' => B::make('b'), $c, C::make('c')]")
        assert [i for i, _ in sibling_declarations(array)] == [0, 3]

    def test_replace_and_drop(self):
        fragment = parse_fragment("A::make('a'), B::make('b'), C::make('c')")
        replacement = parse_fragment("D::make('d')").chains[0]
        result = replace_siblings(fragment, {0: replacement, 2: None})
        assert [c.declared_name for c in result.chains] == ["d", "b"]


class TestSectionGroupingRule:
    """Tests for SectionGroupingRule."""

    def setup_method(self):
        self.rule = SectionGroupingRule()

    def context(self, config, ancestors=()):
        return RewriteContext(config, ancestors)

    def test_without_groups_never_matches(self, default_config):
        fragment = parse_fragment(ADDRESS_FIELDS)
        assert not self.rule.matches(fragment, self.context(default_config))

    def test_groups_at_first_match_position(self, address_config):
        fragment = parse_fragment(ADDRESS_FIELDS)
        context = self.context(address_config)
        assert self.rule.matches(fragment, context)

        rewritten = self.rule.rewrite(fragment, context)
        assert emit_fragment(rewritten) == (
            "TextInput::make('name'),\n"
            "Section::make('Address')\n"
            "    ->schema([\n"
            "        TextInput::make('address_street'),\n"
            "        TextInput::make('address_city'),\n"
            "    ]),\n"
            "TextInput::make('email')\n"
        )
        assert EquivalenceChecker(address_config).check(fragment, rewritten, self.rule).accepted

    def test_output_does_not_match(self, address_config):
        context = self.context(address_config)
        rewritten = self.rule.rewrite(parse_fragment(ADDRESS_FIELDS), context)
        assert not self.rule.matches(rewritten, context)

    def test_too_few_fields(self, address_config):
        fragment = parse_fragment("TextInput::make('name'), TextInput::make('address_city')")
        assert not self.rule.matches(fragment, self.context(address_config))

    def test_nested_schema_array(self, address_config):
        """Test grouping applies to arrays inside a declaration."""
        array = parse_expression(
            "[TextInput::make('address_street'), TextInput::make('address_city')]"
        )
        owner = parse_fragment("Tab::make('Contact')->schema([])").chains[0]
        context = self.context(address_config, (owner,))
        assert self.rule.matches(array, context)

    def test_no_regrouping_inside_own_section(self, address_config):
        group = address_config.section_groups[0]
        section = build_section(
            group,
            list(parse_fragment("TextInput::make('address_street'), TextInput::make('address_city')").chains),
        )
        array = section.calls[1].args[0].value
        context = self.context(address_config, (section,))
        assert is_section(section, group)
        assert not self.rule.matches(array, context)

    def test_groups_claim_fields_in_order(self):
        config = StyleConfig(
            section_groups=[
                SectionGroup(title="Address", prefix="address_"),
                SectionGroup(title="Dates", suffix="_at", construct="Fieldset"),
            ]
        )
        fragment = parse_fragment(
            "DatePicker::make('address_moved_at'),"
            "TextInput::make('address_city'),"
            "DatePicker::make('published_at'),"
            "DatePicker::make('archived_at')"
        )
        context = self.context(config)
        rewritten = self.rule.rewrite(fragment, context)
        assert [(c.root.name, c.declared_name) for c in rewritten.chains] == [
            ("Section", "Address"),
            ("Fieldset", "Dates"),
        ]
        substitution = self.rule.substitution(config)
        assert substitution.is_added("Fieldset::make")
        assert EquivalenceChecker(config).check(fragment, rewritten, self.rule).accepted


class TestDuplicateExtractionRule:
    """Tests for DuplicateExtractionRule."""

    def setup_method(self):
        self.rule = DuplicateExtractionRule()
        self.context = RewriteContext(StyleConfig())

    def test_is_advisory(self):
        assert self.rule.is_advisory

    def test_flags_name_only_differences(self, fragments):
        fragment = parse_fragment(fragments["duplicate"])
        assert self.rule.matches(fragment, self.context)
        assert self.rule.advise(fragment, self.context) == [
            "3 declarations differ only by name ('first_name', 'last_name', 'nickname'); "
            "consider extracting a shared definition"
        ]

    def test_rewrite_returns_node_unchanged(self, fragments):
        fragment = parse_fragment(fragments["duplicate"])
        assert self.rule.rewrite(fragment, self.context) is fragment

    def test_below_threshold(self):
        fragment = parse_fragment(
            "TextInput::make('a')->required(), TextInput::make('b')->required()"
        )
        assert self.rule.advise(fragment, self.context) == []
        config = StyleConfig(min_duplicates=2)
        assert len(self.rule.advise(fragment, RewriteContext(config))) == 1

    def test_other_differences_are_not_duplicates(self):
        fragment = parse_fragment(
            "TextInput::make('a')->maxLength(10),"
            "TextInput::make('b')->maxLength(20),"
            "TextInput::make('c')->maxLength(30)"
        )
        assert self.rule.advise(fragment, self.context) == []

    def test_bare_constructors_are_ignored(self):
        fragment = parse_fragment("TextInput::make('a'), TextInput::make('b'), TextInput::make('c')")
        assert self.rule.advise(fragment, self.context) == []

    def test_name_blind(self):
        first, second = parse_fragment(
            "TextInput::make('a', 'x')->required(), TextInput::make('b', 'x')->required()"
        ).chains
        assert name_blind(first) == name_blind(second)
        assert name_blind(first).calls[0].args[1] == first.calls[0].args[1]
