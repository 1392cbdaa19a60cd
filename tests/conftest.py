"""Shared fixtures and helpers for tests."""

from pathlib import Path

import pytest
from tree_sitter import Parser
from tree_sitter_language_pack import get_parser

from require_rewriter.core.transform import RequireTransformer
from require_rewriter.models import Options

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def javascript_parser() -> Parser:
    """Return a tree-sitter parser for JavaScript."""
    return get_parser("javascript")


@pytest.fixture
def views_project(tmp_path: Path) -> Path:
    """A small project: src/main.js next to src/views/{Home.vue, about/index.vue}."""
    views = tmp_path / "src" / "views"
    (views / "about").mkdir(parents=True)
    (views / "Home.vue").write_text("<template><h1>Home</h1></template>\n")
    (views / "about" / "index.vue").write_text("<template><h1>About</h1></template>\n")
    (tmp_path / "src" / "main.js").write_text("")
    return tmp_path


@pytest.fixture
def transformer() -> RequireTransformer:
    return RequireTransformer(Options())
