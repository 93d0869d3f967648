"""
tests/conftest.py
Shared fixtures for the expressgen test suite.

No external mocking libraries are used; real file I/O is performed
inside temporary directories managed by pytest's tmp_path fixture.
"""

from __future__ import annotations

import logging
import pathlib
from typing import Dict, Iterator

import pytest

from expressgen.generator import ProjectScaffolder
from expressgen.models import (
    DEFAULT_ANCHOR_MARKER,
    GeneratorConfig,
    IdentifierForms,
    PatchStrategy,
)
from expressgen.templates import TemplateGenerator
from expressgen.utils import derive_identifiers


# ---------------------------------------------------------------------------
# Logging isolation (the CLI reconfigures the "expressgen" logger)
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    yield
    root_logger = logging.getLogger("expressgen")
    root_logger.handlers.clear()
    root_logger.propagate = True
    root_logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

MINIMAL_INDEX: str = (
    "const express = require('express');\n"
    "const app = express();\n"
    "\n"
    f"{DEFAULT_ANCHOR_MARKER}\n"
    "\n"
    "app.listen(5000);\n"
)


def snapshot(root: pathlib.Path) -> Dict[str, bytes]:
    """relative path → bytes for every file under *root*."""
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


@pytest.fixture()
def take_snapshot():
    return snapshot


# ---------------------------------------------------------------------------
# Config / template fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def config() -> GeneratorConfig:
    return GeneratorConfig()


@pytest.fixture()
def ledger_config() -> GeneratorConfig:
    return GeneratorConfig(patch_strategy=PatchStrategy.LEDGER)


@pytest.fixture()
def templates(config: GeneratorConfig) -> TemplateGenerator:
    return TemplateGenerator(config)


@pytest.fixture()
def products() -> IdentifierForms:
    return derive_identifiers("Products")


# ---------------------------------------------------------------------------
# Project roots
# ---------------------------------------------------------------------------


@pytest.fixture()
def bare_root(tmp_path: pathlib.Path) -> pathlib.Path:
    """A root holding only ``src/index.js`` with the anchor and nothing mounted."""
    root = tmp_path / "bare"
    (root / "src").mkdir(parents=True)
    (root / "src" / "index.js").write_text(MINIMAL_INDEX, encoding="utf-8")
    return root


@pytest.fixture()
def project_root(tmp_path: pathlib.Path, config: GeneratorConfig) -> pathlib.Path:
    """A root scaffolded with the default (literal) configuration."""
    root = tmp_path / "my-api"
    root.mkdir()
    ProjectScaffolder(config).scaffold(root)
    return root


@pytest.fixture()
def ledger_root(tmp_path: pathlib.Path, ledger_config: GeneratorConfig) -> pathlib.Path:
    """A root scaffolded with the ledger strategy (managed route block)."""
    root = tmp_path / "ledger-api"
    root.mkdir()
    ProjectScaffolder(ledger_config).scaffold(root)
    return root
