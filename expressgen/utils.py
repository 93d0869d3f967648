# File: expressgen/utils.py
"""
ExpressGen - Utility Functions & Helpers
==========================================
Identifier derivation, file I/O and small helpers used throughout the
generation pipeline.

- The identifier helpers are cached with ``@lru_cache`` since the same
  name is re-derived by every template.
- File writes go through a temp file plus ``os.replace`` so a crash never
  leaves a half-written source file behind.
"""

from __future__ import annotations

import functools
import hashlib
import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Any, List, Optional

import yaml

from expressgen.errors import ConfigError
from expressgen.models import IdentifierForms

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("expressgen.utils")


# ---------------------------------------------------------------------------
# Identifier derivation
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def capitalize_first(name: str) -> str:
    """
    Upper-case the first character, leave the rest untouched.

    Examples:
        >>> capitalize_first("products")
        'Products'
        >>> capitalize_first("orderItems")
        'OrderItems'
    """
    if not name:
        return ""
    return name[0].upper() + name[1:]


@functools.lru_cache(maxsize=None)
def derive_identifiers(raw: str) -> IdentifierForms:
    """
    Derive ``{slug, symbol}`` from a raw resource name.

    ``slug`` is the whole name lower-cased; ``symbol`` is the raw name with
    only its first character upper-cased.  No sanitisation is performed
    here; callers validate first (see ``validators.validate_resource_name``).

    Examples:
        >>> derive_identifiers("Products")
        IdentifierForms(slug='products', symbol='Products')
        >>> derive_identifiers("orderItems")
        IdentifierForms(slug='orderitems', symbol='OrderItems')
    """
    return IdentifierForms(slug=raw.lower(), symbol=capitalize_first(raw))


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> bool:
    """
    Create directory (and parents) if it doesn't exist.

    Returns True if the directory was created by this call.
    """
    if path.is_dir():
        return False
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Created directory: %s", path)
    return True


def write_file(path: Path, content: str, atomic: bool = True) -> int:
    """
    Write *content* to *path*, overwriting whatever is there.

    When *atomic* is True the bytes go to a temporary sibling first and are
    renamed into place.  Errors are re-raised after the temp file is
    removed.

    Returns the number of bytes written.
    """
    ensure_directory(path.parent)

    encoded: bytes = content.encode("utf-8")

    if atomic:
        fd, tmp_path = tempfile.mkstemp(
            dir=str(path.parent),
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(encoded)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
    else:
        path.write_bytes(encoded)

    logger.debug("Wrote %d bytes to %s", len(encoded), path)
    return len(encoded)


def read_file(path: Path) -> str:
    """Read a file as text, leaving its line endings untranslated."""
    with open(path, "r", encoding="utf-8", newline="") as fh:
        return fh.read()


def load_data_file(path: Path) -> Any:
    """
    Load a YAML or JSON document.

    Dispatches on the file extension; unknown extensions are parsed as YAML
    (a superset of JSON).

    Raises:
        ConfigError: If the file is missing or cannot be parsed.
    """
    if not path.is_file():
        raise ConfigError(f"File not found: {path}")

    text: str = read_file(path)
    suffix: str = path.suffix.lower()

    try:
        if suffix == ".json":
            return json.loads(text)
        return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Cannot parse {path}: {exc}") from exc


# ---------------------------------------------------------------------------
# Checksum & metrics
# ---------------------------------------------------------------------------


def sha256_hex(content: str) -> str:
    """Return SHA-256 hex digest of a string."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def count_lines(content: str) -> int:
    """Count the number of lines in a string."""
    if not content:
        return 0
    return content.count("\n") + (1 if not content.endswith("\n") else 0)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Simple context-manager timer for profiling pipeline steps.

    Usage:
        with Timer("render templates") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.debug("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "capitalize_first",
    "derive_identifiers",
    "ensure_directory",
    "write_file",
    "read_file",
    "load_data_file",
    "sha256_hex",
    "count_lines",
    "Timer",
]

logger.debug("expressgen.utils loaded, %d public symbols.", len(__all__))
