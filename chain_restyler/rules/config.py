"""
Style configuration for the rewrite engine.

The category order, the method-name -> category map and the section
grouping list are explicit configuration data, not engine constants.
Configuration is loaded hierarchically from JSON files and validated
with pydantic; a StyleConfig is immutable once built.
"""

import json
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ..errors import ConfigurationError
from ..syntax.nodes import ChainExpression
from .base import Category

DEFAULT_CATEGORY_MAP: dict[str, list[str]] = {
    Category.IDENTIFICATION.value: [
        "make", "id", "key", "statePath", "relationship", "options",
    ],
    Category.LABEL_DESCRIPTION.value: [
        "label", "hiddenLabel", "description", "helperText", "hint",
        "heading", "modalHeading", "modalDescription", "tooltip",
    ],
    Category.PLACEHOLDER.value: ["placeholder"],
    Category.VALIDATION.value: [
        "required", "nullable", "email", "unique", "exists", "minLength",
        "maxLength", "length", "minValue", "maxValue", "rules", "regex",
        "numeric", "integer", "confirmed", "same", "different", "in",
        "notIn", "url", "tel", "requiredIf", "requiredWith", "requiredWithout",
    ],
    Category.REACTIVE_BEHAVIOR.value: ["live", "reactive", "lazy", "debounce"],
    Category.CALLBACK.value: [
        "afterStateUpdated", "afterStateHydrated", "formatStateUsing",
        "getStateUsing", "dehydrateStateUsing", "mutateFormDataUsing",
        "requiresConfirmation", "action", "before", "after",
    ],
    Category.TABLE_FEATURE.value: [
        "searchable", "sortable", "toggleable", "copyable", "wrap", "limit",
        "date", "dateTime", "since", "money", "badge", "preload",
    ],
    Category.VISIBILITY_CONTROL.value: [
        "visible", "hidden", "visibleOn", "hiddenOn", "disabled",
        "disabledOn", "readOnly",
    ],
}


def default_category_map() -> dict[str, Category]:
    """Flatten DEFAULT_CATEGORY_MAP into method name -> Category."""
    return {
        name: Category(category)
        for category, names in DEFAULT_CATEGORY_MAP.items()
        for name in names
    }


class SectionGroup(BaseModel):
    """One configured field cluster to wrap in a grouping construct."""

    model_config = ConfigDict(frozen=True)

    title: str
    prefix: str | None = Field(default=None)
    suffix: str | None = Field(default=None)
    construct: str = Field(default="Section")
    min_fields: int = Field(default=2, ge=2)

    @field_validator("title", "construct")
    @classmethod
    def validate_non_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("title and construct cannot be empty")
        return v.strip()

    @model_validator(mode="after")
    def validate_affix(self) -> "SectionGroup":
        if not self.prefix and not self.suffix:
            raise ValueError(f"section group '{self.title}' needs a prefix or a suffix")
        return self

    def matches_name(self, name: str | None) -> bool:
        """Check whether a declared field name belongs to this group."""
        if not name:
            return False
        if self.prefix and name.startswith(self.prefix):
            return True
        return bool(self.suffix and name.endswith(self.suffix))


class StyleConfig(BaseModel):
    """Immutable style guide passed to every engine invocation."""

    model_config = ConfigDict(frozen=True)

    category_order: list[Category] = Field(default_factory=lambda: list(Category))
    category_map: dict[str, Category] = Field(default_factory=default_category_map)
    order_exempt: list[str] = Field(default_factory=lambda: ["modifyQueryUsing"])
    constructor_names: list[str] = Field(default_factory=lambda: ["make"])
    section_groups: list[SectionGroup] = Field(default_factory=list)
    max_passes: int = Field(default=10, ge=1, le=1000)
    min_duplicates: int = Field(default=3, ge=2)
    disabled_rules: list[str] = Field(default_factory=list)
    relation_name_style: Literal["camel", "snake"] = Field(default="camel")

    @field_validator("category_order")
    @classmethod
    def validate_category_order(cls, v: list[Category]) -> list[Category]:
        if len(v) != len(Category) or set(v) != set(Category):
            missing = sorted(c.value for c in set(Category) - set(v))
            raise ValueError(
                "category_order must list every category exactly once"
                + (f" (missing: {', '.join(missing)})" if missing else "")
            )
        return v

    def rank(self, category: Category) -> int:
        """Position of ``category`` in the configured total order."""
        return self.category_order.index(category)

    def category_of(self, call_name: str) -> Category:
        return self.category_map.get(call_name, Category.OTHER)

    def is_exempt(self, call_name: str) -> bool:
        return call_name in self.order_exempt

    def is_component(self, node: Any) -> bool:
        """Whether ``node`` is a UI component declaration (``X::make(...)``)."""
        return (
            isinstance(node, ChainExpression)
            and node.is_declaration
            and node.calls[0].name in self.constructor_names
        )

    def is_rule_enabled(self, rule_id: str) -> bool:
        return rule_id not in self.disabled_rules

    @classmethod
    def from_dict(cls, data: dict[str, Any], source: str | None = None) -> "StyleConfig":
        """Validate a configuration dictionary.

        Raises:
            ConfigurationError: If validation fails.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(str(e), config_file=source) from e

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return self.model_dump(mode="json")


def merge_config_data(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge two raw config dicts; ``category_map`` merges per key, the rest replaces."""
    result = dict(base)
    for key, value in override.items():
        if key == "category_map" and isinstance(value, dict):
            merged = dict(result.get("category_map", {}))
            merged.update(value)
            result[key] = merged
        else:
            result[key] = value
    return result


class StyleConfigLoader:
    """Loads style configuration from restyle.config.json files."""

    CONFIG_FILENAME = "restyle.config.json"
    LOCAL_CONFIG_FILENAME = "restyle.config.local.json"
    PROJECT_CONFIG_DIR = ".restyler"
    GLOBAL_CONFIG_DIR = Path.home() / ".chain-restyler"

    def __init__(self, project_path: Path | None = None):
        """Initialize the config loader.

        Args:
            project_path: Path to the project root (defaults to CWD)
        """
        self.project_path = project_path or Path.cwd()

    def candidate_paths(self) -> list[Path]:
        """Config files in load order (later overrides earlier)."""
        project_dir = self.project_path / self.PROJECT_CONFIG_DIR
        return [
            self.GLOBAL_CONFIG_DIR / self.CONFIG_FILENAME,
            project_dir / self.CONFIG_FILENAME,
            project_dir / self.LOCAL_CONFIG_FILENAME,
        ]

    def load(self, explicit_file: Path | None = None) -> StyleConfig:
        """Load configuration with hierarchical merging.

        Load order (later overrides earlier):
        1. Built-in defaults
        2. Global config (~/.chain-restyler/restyle.config.json)
        3. Project config (<project>/.restyler/restyle.config.json)
        4. Local config (<project>/.restyler/restyle.config.local.json)
        5. ``explicit_file``, when given

        Returns:
            Merged StyleConfig

        Raises:
            ConfigurationError: If a file is unreadable or the result is invalid.
        """
        data: dict[str, Any] = StyleConfig().to_dict()
        last_source: str | None = None

        paths = [p for p in self.candidate_paths() if p.exists()]
        if explicit_file is not None:
            paths.append(explicit_file)

        for path in paths:
            data = merge_config_data(data, self._load_file(path))
            last_source = str(path)

        return StyleConfig.from_dict(data, source=last_source)

    def _load_file(self, path: Path) -> dict[str, Any]:
        """Load one configuration file.

        Args:
            path: Path to the config file

        Returns:
            Raw configuration dictionary
        """
        try:
            with open(path) as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            raise ConfigurationError(f"Could not load config: {e}", str(path)) from e
        if not isinstance(data, dict):
            raise ConfigurationError("Config root must be a JSON object", str(path))
        return data
