# File: expressgen/models.py
"""
ExpressGen - Core Data Models
==============================
Pydantic V2 models and small value types shared by the whole pipeline:

    Raw input → IdentifierForms → Templates → Exporter → Entry-point patch

Everything here is transient and derived per invocation; nothing is
persisted except the files the generator writes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("expressgen.models")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_ANCHOR_MARKER: str = "// Add generated routes here"
DEFAULT_COLUMNS: Tuple[str, ...] = ("name", "email", "address")

# Resource file kind → (directory under src/, file-name suffix)
RESOURCE_FILE_LAYOUT: Dict[str, Tuple[str, str]] = {
    "route": ("routes", "Routes.js"),
    "controller": ("controller", "Controller.js"),
    "model": ("models", "Models.js"),
}


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ProtectionChoice(str, Enum):
    """Answer to "protect this resource with the JWT middleware?"."""

    PROTECT = "Yes"
    UNPROTECT = "No"
    CANCELLED = "cancelled"

    @classmethod
    def from_answer(cls, answer: Optional[str]) -> "ProtectionChoice":
        """
        Map a picker/prompt answer onto a choice.

        ``None`` (dismissed prompt) and anything unrecognised count as
        cancelled.
        """
        if answer is None:
            return cls.CANCELLED
        normalised: str = answer.strip().lower()
        if normalised in ("yes", "y"):
            return cls.PROTECT
        if normalised in ("no", "n"):
            return cls.UNPROTECT
        return cls.CANCELLED

    @property
    def is_protected(self) -> bool:
        return self is ProtectionChoice.PROTECT


class PatchStrategy(str, Enum):
    """How the entry-point file is patched."""

    LITERAL = "literal"
    LEDGER = "ledger"


# ---------------------------------------------------------------------------
# Identifier forms
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class IdentifierForms:
    """
    The two names derived from a raw resource name.

    ``slug`` goes into paths, file names, URL segments and the SQL table
    name; ``symbol`` goes into identifiers inside the generated source.
    All other names are built from these two so they stay consistent
    across the route, controller and model files.
    """

    slug: str
    symbol: str

    @property
    def routes_var(self) -> str:
        return f"{self.slug}Routes"

    @property
    def controller_name(self) -> str:
        return f"{self.symbol}Controller"

    @property
    def model_name(self) -> str:
        return f"{self.symbol}Model"

    @property
    def id_param(self) -> str:
        return f"id{self.symbol}"

    @property
    def url_path(self) -> str:
        return f"/{self.slug}"

    @property
    def table_name(self) -> str:
        return self.slug

    def file_name(self, kind: str) -> str:
        """File name for one of the ``RESOURCE_FILE_LAYOUT`` kinds."""
        _, suffix = RESOURCE_FILE_LAYOUT[kind]
        return f"{self.slug}{suffix}"

    def module_name(self, kind: str) -> str:
        """File name without the ``.js`` extension, as passed to ``require``."""
        return self.file_name(kind).rsplit(".", 1)[0]


# ---------------------------------------------------------------------------
# Shared pydantic configuration
# ---------------------------------------------------------------------------

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    use_enum_values=True,
    frozen=False,
    extra="forbid",
)


# ---------------------------------------------------------------------------
# Resource schema
# ---------------------------------------------------------------------------


class ResourceSchema(BaseModel):
    """
    Column set used by the generated model's INSERT and UPDATE queries.

    With no explicit schema the generator uses exactly ``name, email,
    address``.
    """

    model_config = _SHARED_CONFIG

    columns: List[str] = Field(
        default_factory=lambda: list(DEFAULT_COLUMNS),
        min_length=1,
        description="Writable columns, in query order.",
    )

    @field_validator("columns")
    @classmethod
    def _strip_and_dedupe_check(cls, v: List[str]) -> List[str]:
        cleaned: List[str] = [c.strip() for c in v]
        if any(not c for c in cleaned):
            raise ValueError("Column names must not be empty.")
        if len(cleaned) != len(set(cleaned)):
            dupes: List[str] = sorted({c for c in cleaned if cleaned.count(c) > 1})
            raise ValueError(f"Duplicate column names detected: {dupes}")
        return cleaned

    @classmethod
    def from_csv(cls, text: str) -> "ResourceSchema":
        """Build from a comma-separated list such as ``"title,price"``."""
        return cls(columns=[part for part in text.split(",") if part.strip()])


# ---------------------------------------------------------------------------
# Generator configuration
# ---------------------------------------------------------------------------


class GeneratorConfig(BaseModel):
    """
    Settings for one run of either pipeline.

    Loaded from an optional ``expressgen.yaml`` at the project root and
    then overridden from the command line.
    """

    model_config = _SHARED_CONFIG

    src_dir: str = Field(
        default="src", min_length=1, description="Source directory under the root."
    )
    entry_point: str = Field(
        default="index.js",
        min_length=1,
        description="Entry-point file name inside src_dir.",
    )
    anchor_marker: str = Field(
        default=DEFAULT_ANCHOR_MARKER,
        min_length=1,
        description="Sentinel line marking where routes are mounted.",
    )
    patch_strategy: PatchStrategy = Field(
        default=PatchStrategy.LITERAL,
        description="Entry-point patch algorithm.",
    )
    validate_names: bool = Field(
        default=True,
        description="Reject resource names unsafe for paths, SQL or JS.",
    )
    atomic_writes: bool = Field(
        default=True, description="Write through a temp file and rename."
    )
    dry_run: bool = Field(
        default=False, description="Render everything but write nothing."
    )
    default_columns: List[str] = Field(
        default_factory=lambda: list(DEFAULT_COLUMNS),
        min_length=1,
        description="Columns used when no resource schema is given.",
    )

    @property
    def entry_point_relpath(self) -> str:
        """``<src>/<entry_point>`` as a POSIX relative path."""
        return f"{self.src_dir}/{self.entry_point}"

    def entry_point_path(self, root: Path) -> Path:
        return root / self.src_dir / self.entry_point

    def default_schema(self) -> ResourceSchema:
        return ResourceSchema(columns=list(self.default_columns))


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "DEFAULT_ANCHOR_MARKER",
    "DEFAULT_COLUMNS",
    "RESOURCE_FILE_LAYOUT",
    "ProtectionChoice",
    "PatchStrategy",
    "IdentifierForms",
    "ResourceSchema",
    "GeneratorConfig",
]

logger.debug("expressgen.models loaded, %d public symbols.", len(__all__))
