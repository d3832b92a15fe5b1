"""Root conftest — shared fixtures for all test suites."""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Callable, Iterator

import pytest
import structlog

# Ensure src/ is importable without an editable install.
_src = str(Path(__file__).resolve().parent.parent / "src")
if _src not in sys.path:
    sys.path.insert(0, _src)

_KAWATTE_ENV = (
    "KAWATTE_PAT", "KAWATTE_DIR", "KAWATTE_MATCH", "KAWATTE_EXCLUDE",
    "KAWATTE_MATCH_DIR", "KAWATTE_EXCLUDE_DIR", "KAWATTE_DRY_RUN",
    "KAWATTE_KEEP_GOING", "KAWATTE_VERBOSE", "KAWATTE_LOG_JSON",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _KAWATTE_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Undo any ``setup_logging`` call made by a CLI test."""
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.WARNING)


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    """Create files from a ``{relative_path: content}`` mapping under tmp_path/tree."""

    def _make(files: dict[str, str]) -> Path:
        root = tmp_path / "tree"
        root.mkdir(exist_ok=True)
        for rel, content in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return root

    return _make


@pytest.fixture
def cycle_pairs() -> list[tuple[str, str]]:
    return [("a", "b"), ("b", "c"), ("c", "a")]


@pytest.fixture
def pattern_file(tmp_path: Path) -> Callable[[str], Path]:
    def _write(content: str) -> Path:
        path = tmp_path / "subs.csv"
        path.write_text(content, encoding="utf-8")
        return path

    return _write
