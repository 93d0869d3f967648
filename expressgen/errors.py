# File: expressgen/errors.py
"""
ExpressGen - Exception Hierarchy
==================================

Every failure the generator raises on purpose derives from
``ExpressGenError`` so callers can catch the whole family at once.

``OSError`` raised by the file system is **not** wrapped: a
failed write propagates unchanged, leaving files from earlier steps on disk.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from expressgen.validators import ValidationResult


class ExpressGenError(Exception):
    """Base class for all ExpressGen errors."""


class ProjectRootError(ExpressGenError):
    """The project root is missing or is not a directory."""


class ConfigError(ExpressGenError):
    """A configuration or resource-schema file could not be loaded."""


class EntryPointError(ExpressGenError):
    """The entry-point file cannot be patched (missing file, anchor or bad block)."""


class ResourceNameError(ExpressGenError):
    """A raw resource name (or column name) was rejected by validation."""

    def __init__(self, name: str, result: Optional["ValidationResult"] = None) -> None:
        self.name: str = name
        self.result: Optional["ValidationResult"] = result
        messages: List[str] = (
            [item.message for item in result.errors] if result is not None else []
        )
        detail: str = "; ".join(messages) if messages else "invalid name"
        super().__init__(f"Invalid resource name {name!r}: {detail}")


__all__: List[str] = [
    "ExpressGenError",
    "ProjectRootError",
    "ConfigError",
    "EntryPointError",
    "ResourceNameError",
]
