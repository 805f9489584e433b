"""Unit tests for chain_restyler.batch module."""

import time

import pytest

from chain_restyler import apply
from chain_restyler.batch import BatchResult, restyle_many
from chain_restyler.rules.base import RewriteContext, RewriteRule, WarningKind
from chain_restyler.rules.catalog import PatternCatalog
from chain_restyler.syntax.nodes import ChainExpression, Node


class SlowRule(RewriteRule):
    """Sleeps while inspecting the 'slow' declaration and never matches."""

    def __init__(self, delay: float):
        self.delay = delay

    @property
    def rule_id(self) -> str:
        return "TEST.SLOW"

    @property
    def name(self) -> str:
        return "Slow"

    @property
    def family(self) -> str:
        return "test"

    @property
    def target(self):
        return ChainExpression

    def matches(self, node: Node, context: RewriteContext) -> bool:
        if node.declared_name == "slow":
            time.sleep(self.delay)
        return False

    def rewrite(self, node: Node, context: RewriteContext) -> Node:
        return node


class TestRestyleMany:
    """Tests for restyle_many()."""

    def test_results_keep_input_order(self, fragments):
        sources = [fragments["unordered"], fragments["relationship"], fragments["closure"]]
        batch = restyle_many(sources, max_workers=3)
        assert [r.original for r in batch.results] == sources
        assert [r.applied_rule_ids for r in batch.results] == [
            ["ORDER.CATEGORY_SORT"],
            ["SUBSTITUTE.RELATIONSHIP_BINDING"],
            ["CLOSURE.EXPRESSION_BODY"],
        ]
        assert batch.changed_count == 3

    def test_syntax_error_is_isolated(self, fragments):
        """Test one bad fragment does not affect its neighbours."""
        batch = restyle_many([fragments["unbalanced"], fragments["unordered"]])
        assert batch.error_count == 1
        assert batch.results[0].text == fragments["unbalanced"]
        assert batch.results[1].changed

    def test_matches_sequential_apply(self, fragments):
        sources = list(fragments.values())
        batch = restyle_many(sources, max_workers=2)
        assert [r.text for r in batch.results] == [apply(s).text for s in sources]

    def test_empty_input(self):
        batch = restyle_many([])
        assert batch.results == []
        assert batch.to_dict()["summary"] == {"total": 0, "changed": 0, "syntax_errors": 0}

    def test_invalid_worker_count(self):
        with pytest.raises(ValueError):
            restyle_many(["A::make('a')"], max_workers=0)

    def test_config_builds_catalog(self, fragments, address_config):
        source = "TextInput::make('address_street'), TextInput::make('address_city')"
        batch = restyle_many([source], config=address_config)
        assert batch.results[0].applied_rule_ids == ["STRUCTURE.SECTION_GROUPING"]

    def test_timeout_leaves_fragment_unchanged(self):
        catalog = PatternCatalog.load([SlowRule(delay=0.5)])
        sources = ["TextInput::make('slow')", "TextInput::make('fast')"]
        batch = restyle_many(sources, catalog=catalog, max_workers=2, timeout_seconds=0.05)

        slow, fast = batch.results
        assert slow.text == sources[0]
        assert [w.kind for w in slow.warnings] == [WarningKind.TIMED_OUT]
        assert fast.warnings == []

    def test_timeout_returns_before_slow_worker_finishes(self):
        catalog = PatternCatalog.load([SlowRule(delay=2.0)])
        start = time.monotonic()
        batch = restyle_many(
            ["TextInput::make('slow')"], catalog=catalog, timeout_seconds=0.05
        )
        assert time.monotonic() - start < 1.5
        assert [w.kind for w in batch.results[0].warnings] == [WarningKind.TIMED_OUT]


class TestBatchResult:
    """Tests for BatchResult."""

    def test_to_dict_summary(self, fragments):
        batch = restyle_many([fragments["unordered"], fragments["unbalanced"]])
        data = batch.to_dict()
        assert data["summary"] == {"total": 2, "changed": 1, "syntax_errors": 1}
        assert len(data["results"]) == 2

    def test_default_is_empty(self):
        assert BatchResult().changed_count == 0
