"""
Shared fixtures for the chain-restyler test suite.

Provides:
- Default and grouped style configurations
- Frozen catalogs built from them
- Sample fragments for the documented scenarios
- Isolation of the package logger and the global config directory
"""

import logging
from pathlib import Path

import pytest

from chain_restyler.restyler_logging import ROOT_LOGGER
from chain_restyler.rules.catalog import PatternCatalog, load_default_catalog
from chain_restyler.rules.config import StyleConfig, StyleConfigLoader

# ---------------------------------------------------------------------------
# Sample fragments
# ---------------------------------------------------------------------------

RELATIONSHIP_SOURCE = (
    "Select::make('author_id')->options(User::pluck('name', 'id'))->searchable()"
)

CLOSURE_SOURCE = (
    "TextInput::make('company')"
    "->required(function (Get $get) { return $get('type') === 'business'; })"
)

UNORDERED_SOURCE = "TextInput::make('email')->required()->id('email-input')->label('Email')"

DUPLICATE_SOURCE = """TextInput::make('first_name')->required()->maxLength(255),
TextInput::make('last_name')->required()->maxLength(255),
TextInput::make('nickname')->required()->maxLength(255)"""

UNBALANCED_SOURCE = "TextInput::make('email'))->required()"

CONFIRM_SOURCE = """Action::make('delete')->action(function ($record) {
    if (! confirm('Delete this post?')) {
        return;
    }
    $record->delete();
})"""



@pytest.fixture()
def fragments() -> dict[str, str]:
    """Sample fragments keyed by what they exercise."""
    return {
        "relationship": RELATIONSHIP_SOURCE,
        "closure": CLOSURE_SOURCE,
        "unordered": UNORDERED_SOURCE,
        "duplicate": DUPLICATE_SOURCE,
        "unbalanced": UNBALANCED_SOURCE,
        "confirm": CONFIRM_SOURCE,
    }


# ---------------------------------------------------------------------------
# Configuration and catalogs
# ---------------------------------------------------------------------------


@pytest.fixture()
def default_config() -> StyleConfig:
    """The built-in style configuration."""
    return StyleConfig()


@pytest.fixture()
def address_config() -> StyleConfig:
    """Configuration with an 'Address' section group."""
    return StyleConfig.from_dict(
        {"section_groups": [{"title": "Address", "prefix": "address_"}]}
    )


@pytest.fixture()
def catalog(default_config) -> PatternCatalog:
    """Frozen built-in catalog with the default configuration."""
    return load_default_catalog(default_config)


@pytest.fixture()
def address_catalog(address_config) -> PatternCatalog:
    return load_default_catalog(address_config)


# ---------------------------------------------------------------------------
# Isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_global_config(tmp_path_factory, monkeypatch) -> Path:
    """Point the global config directory at an empty temp dir."""
    global_dir = tmp_path_factory.mktemp("global_config")
    monkeypatch.setattr(StyleConfigLoader, "GLOBAL_CONFIG_DIR", global_dir)
    return global_dir


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo any setup_logging() call so caplog sees package records."""
    yield
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
