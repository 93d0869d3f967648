# File: expressgen/validators.py
"""
ExpressGen - Name, Schema & Configuration Validators
======================================================
A **pure-function validation layer** sitting in front of the generator.

The raw resource name flows into file paths, URL segments, SQL table
names and JavaScript identifiers.  This module rejects names that would
produce broken or unsafe artifacts:

- path separators / parent references  → ``NAME_PATH``
- SQL metacharacters                   → ``NAME_SQL``
- characters invalid in an identifier  → ``NAME_IDENTIFIER``
- SQL reserved words as table names    → ``NAME_RESERVED_SQL``
- clashes with the scaffolded auth set → ``NAME_AUTH_CLASH``

Usage by downstream modules:
    from expressgen.validators import validate_resource_name
    result = validate_resource_name(raw)
    if not result.is_valid:
        raise ResourceNameError(raw, result)
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, FrozenSet, List, Optional

from expressgen.models import GeneratorConfig, ResourceSchema

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("expressgen.validators")

# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class ValidationError:
    """Lightweight error descriptor (no Pydantic overhead)."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "error" | "warning"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()


class ValidationResult:
    """Accumulates ``ValidationError`` instances produced by the validators."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationError] = []

    # -- Mutation -----------------------------------------------------------

    def add_error(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationError("error", code, message, context))

    def add_warning(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationError("warning", code, message, context))

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    # -- Query --------------------------------------------------------------

    @property
    def errors(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_error]

    @property
    def warnings(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_warning]

    @property
    def codes(self) -> List[str]:
        return [e.code for e in self._items]

    @property
    def has_errors(self) -> bool:
        return any(e.is_error for e in self._items)

    @property
    def has_warnings(self) -> bool:
        return any(e.is_warning for e in self._items)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    def summary(self) -> str:
        return (
            f"Validation: {len(self.errors)} error(s), "
            f"{len(self.warnings)} warning(s)."
        )

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are NO errors (i.e. valid)."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)

    def format_report(self) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary()]
        for item in self._items:
            prefix: str = "✗" if item.is_error else "⚠"
            lines.append(f"  {prefix} [{item.code}] {item.message}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Regex patterns & word lists
# ---------------------------------------------------------------------------

_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_PATH_RE: re.Pattern[str] = re.compile(r"[/\\]|\.\.")
_SQL_META_RE: re.Pattern[str] = re.compile(r"[;'\"`%()=*,]|--|/\*|\*/")

# MySQL identifier length limit
_MAX_NAME_LENGTH: int = 64

# Slugs already owned by the scaffolded project
_RESERVED_SLUGS: FrozenSet[str] = frozenset({"auth"})

_SQL_RESERVED_WORDS: FrozenSet[str] = frozenset(
    {
        "select", "insert", "update", "delete", "drop", "create", "alter",
        "table", "column", "index", "from", "where", "join", "inner",
        "outer", "left", "right", "on", "and", "or", "not", "null",
        "true", "false", "in", "between", "like", "is", "as", "order",
        "by", "group", "having", "limit", "offset", "union", "all",
        "distinct", "case", "when", "then", "else", "end", "exists",
        "primary", "foreign", "key", "references", "constraint", "check",
        "default", "unique", "cascade", "set", "values", "into",
        "grant", "revoke", "rollback", "trigger", "procedure",
        "function", "view", "with", "recursive", "interval", "range",
        "rank", "rows", "row", "groups", "lock", "read", "write",
    }
)


# ---------------------------------------------------------------------------
# Individual validators
# ---------------------------------------------------------------------------


def _check_identifier(
    name: str,
    result: ValidationResult,
    prefix: str,
    ctx: Dict[str, Any],
) -> bool:
    """
    Shared path / SQL / identifier / length checks.

    Returns False when the name is unusable and further checks are
    pointless.
    """
    label: str = prefix.lower()

    if _PATH_RE.search(name):
        result.add_error(
            f"{prefix}_PATH",
            f"{label.capitalize()} '{name}' contains a path separator or '..'.",
            ctx,
        )
        return False

    if _SQL_META_RE.search(name):
        result.add_error(
            f"{prefix}_SQL",
            f"{label.capitalize()} '{name}' contains SQL metacharacters.",
            ctx,
        )
        return False

    if not _IDENTIFIER_RE.match(name):
        result.add_error(
            f"{prefix}_IDENTIFIER",
            f"{label.capitalize()} '{name}' is not a valid identifier "
            f"(letters, digits and '_' only, not starting with a digit).",
            ctx,
        )
        return False

    if len(name) > _MAX_NAME_LENGTH:
        result.add_error(
            f"{prefix}_TOO_LONG",
            f"{label.capitalize()} '{name}' is longer than "
            f"{_MAX_NAME_LENGTH} characters.",
            ctx,
        )

    if name.lower() in _SQL_RESERVED_WORDS:
        result.add_error(
            f"{prefix}_RESERVED_SQL",
            f"{label.capitalize()} '{name}' is a SQL reserved word.",
            ctx,
        )

    return True


def validate_resource_name(raw: Optional[str]) -> ValidationResult:
    """
    Validate a raw resource name before any identifier is derived from it.

    The name is checked as typed; the slug (lower-cased) is what becomes the
    table name and file prefix.
    """
    result: ValidationResult = ValidationResult()
    name: str = (raw or "").strip()
    ctx: Dict[str, Any] = {"name": name}

    if not name:
        result.add_error("NAME_EMPTY", "Resource name is empty.", ctx)
        return result

    if not _check_identifier(name, result, "NAME", ctx):
        return result

    if name.lower() in _RESERVED_SLUGS:
        result.add_error(
            "NAME_AUTH_CLASH",
            f"Resource name '{name}' would overwrite the scaffolded "
            f"auth routes and controller.",
            ctx,
        )

    if any(ch.isupper() for ch in name[1:]):
        result.add_warning(
            "NAME_MIXED_CASE",
            f"Resource name '{name}' has inner capitals: file names and the "
            f"table use '{name.lower()}' while identifiers keep '{name[0].upper()}{name[1:]}'.",
            ctx,
        )

    logger.debug("validate_resource_name(%r): %s", name, result.summary())
    return result


def validate_resource_schema(schema: ResourceSchema) -> ValidationResult:
    """Validate every column name of a resource schema."""
    result: ValidationResult = ValidationResult()

    for column in schema.columns:
        ctx: Dict[str, Any] = {"column": column}
        if not _check_identifier(column, result, "COLUMN", ctx):
            continue
        if column.lower() == "id":
            result.add_warning(
                "COLUMN_IS_ID",
                "Column 'id' is the row key; the generated UPDATE will "
                "overwrite it from the request body.",
                ctx,
            )

    logger.debug(
        "validate_resource_schema: %d column(s), %s",
        len(schema.columns),
        result.summary(),
    )
    return result


def validate_config(config: GeneratorConfig) -> ValidationResult:
    """Sanity checks on a loaded ``GeneratorConfig``."""
    result: ValidationResult = ValidationResult()

    if "\n" in config.anchor_marker or config.anchor_marker != config.anchor_marker.strip():
        result.add_error(
            "CONFIG_ANCHOR",
            "anchor_marker must be a single line without surrounding whitespace.",
            {"anchor_marker": config.anchor_marker},
        )

    for field_name in ("src_dir", "entry_point"):
        value: str = getattr(config, field_name)
        if ".." in value or value.startswith(("/", "\\")):
            result.add_error(
                "CONFIG_PATH",
                f"{field_name} must be a relative path inside the project.",
                {field_name: value},
            )

    if not config.entry_point.endswith(".js"):
        result.add_warning(
            "CONFIG_ENTRY_POINT",
            f"entry_point '{config.entry_point}' is not a .js file.",
            {"entry_point": config.entry_point},
        )

    result.merge(validate_resource_schema(config.default_schema()))

    logger.debug("validate_config: %s", result.summary())
    return result


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ValidationError",
    "ValidationResult",
    "validate_resource_name",
    "validate_resource_schema",
    "validate_config",
]

logger.debug("expressgen.validators loaded, %d public symbols.", len(__all__))
