"""
Pattern catalog: the closed, ordered registry of rewrite rules.

The catalog is built once, validated, then frozen. Registration order is
part of the contract: when two rules of equal priority match the same
site, the one registered first wins.
"""

import logging
import re

from ..errors import CatalogLoadError
from ..syntax.nodes import Node
from .base import RewriteRule
from .config import StyleConfig

logger = logging.getLogger(__name__)

RULE_ID_PATTERN = re.compile(r"^[A-Z][A-Z0-9_]*\.[A-Z][A-Z0-9_]*$")


class PatternCatalog:
    """Immutable-after-load registry of rules.

    Example usage:
        catalog = load_default_catalog(StyleConfig())
        for rule in catalog.rules_for(node):
            ...
    """

    def __init__(self, config: StyleConfig | None = None):
        self.config = config or StyleConfig()
        self._rules: list[RewriteRule] = []
        self._index: dict[str, int] = {}
        self._frozen = False

    @classmethod
    def load(
        cls, rules: list[RewriteRule], config: StyleConfig | None = None
    ) -> "PatternCatalog":
        """Build, validate and freeze a catalog.

        Rules disabled in ``config`` are skipped.

        Raises:
            CatalogLoadError: If any rule definition is malformed.
        """
        catalog = cls(config)
        for rule in rules:
            catalog.register(rule)
        catalog.freeze()
        logger.info(f"Loaded {len(catalog)} rewrite rules")
        return catalog

    def register(self, rule: RewriteRule) -> None:
        """Validate and append a rule.

        Args:
            rule: Rule instance to register

        Raises:
            CatalogLoadError: If the catalog is frozen or the rule is malformed.
        """
        if self._frozen:
            raise CatalogLoadError("catalog is frozen; rules cannot be added", rule.rule_id)

        self._validate(rule)

        if not self.config.is_rule_enabled(rule.rule_id):
            logger.debug(f"Rule {rule.rule_id} is disabled in config, skipping")
            return

        self._index[rule.rule_id] = len(self._rules)
        self._rules.append(rule)
        logger.debug(f"Registered rule: {rule.rule_id}")

    def _validate(self, rule: RewriteRule) -> None:
        try:
            rule_id = rule.rule_id
            targets = rule.target
            priority = rule.priority
            idempotent = rule.idempotent
        except Exception as e:
            raise CatalogLoadError(
                f"rule {type(rule).__name__} could not be inspected: {e}"
            ) from e

        if not isinstance(rule_id, str) or not RULE_ID_PATTERN.match(rule_id):
            raise CatalogLoadError(
                "rule id must look like FAMILY.RULE_NAME", str(rule_id)
            )
        if rule_id in self._index:
            raise CatalogLoadError("duplicate rule id", rule_id)
        if isinstance(priority, bool) or not isinstance(priority, int):
            raise CatalogLoadError("priority must be an int", rule_id)
        if not isinstance(idempotent, bool):
            raise CatalogLoadError("idempotent flag must be a bool", rule_id)

        if not isinstance(targets, tuple):
            targets = (targets,)
        if not targets or not all(
            isinstance(t, type) and issubclass(t, Node) for t in targets
        ):
            raise CatalogLoadError("target must be one or more node types", rule_id)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self):
        return iter(list(self._rules))

    def get_rule(self, rule_id: str) -> RewriteRule | None:
        index = self._index.get(rule_id)
        return self._rules[index] if index is not None else None

    def index_of(self, rule_id: str) -> int:
        """Registration index, the documented tie-break."""
        return self._index[rule_id]

    def get_all_rules(self) -> list[RewriteRule]:
        return list(self._rules)

    def rules_for(self, node: Node) -> list[RewriteRule]:
        """Rules targeting ``node``'s type, in resolution order.

        Resolution order: higher priority first; on a tie, the rule
        registered earlier first.
        """
        applicable = [rule for rule in self._rules if rule.applies_to(node)]
        return sorted(
            applicable, key=lambda r: (-r.priority, self._index[r.rule_id])
        )


def builtin_rules() -> list[RewriteRule]:
    """The versioned built-in rule set, in registration order."""
    from .closures.expression_body import ExpressionBodyRule
    from .ordering.category_sort import CategorySortRule
    from .structure.duplicate_extraction import DuplicateExtractionRule
    from .structure.section_grouping import SectionGroupingRule
    from .substitution.character_limit import CharacterLimitRule
    from .substitution.confirmation_modifier import ConfirmationModifierRule
    from .substitution.date_format import DateFormatRule
    from .substitution.relationship_binding import RelationshipBindingRule

    return [
        RelationshipBindingRule(),
        ConfirmationModifierRule(),
        DateFormatRule(),
        CharacterLimitRule(),
        ExpressionBodyRule(),
        CategorySortRule(),
        SectionGroupingRule(),
        DuplicateExtractionRule(),
    ]


def load_default_catalog(config: StyleConfig | None = None) -> PatternCatalog:
    """Build the frozen built-in catalog for ``config``."""
    return PatternCatalog.load(builtin_rules(), config)
