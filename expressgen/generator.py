# File: expressgen/generator.py
"""
ExpressGen - Generation Pipelines (Orchestrator)
==================================================

Two independent pipelines, both taking the project root explicitly:

``ProjectScaffolder.scaffold(root)``
    Directory tree + boilerplate files + ``package.json`` edit.

``ResourceGenerator.generate(root, raw_name, protect)``
    1. Abort silently on an empty name or a cancelled protection choice.
    2. Validate the name (and column schema) unless disabled.
    3. Derive ``{slug, symbol}``.
    4. Render route / controller / model (templates.py).
    5. Write them, overwriting (exporters.py).
    6. Read ``src/index.js``, patch it (patcher.py), write it back.
    7. Return a ``GenerationReport``.

Error handling strategy:
    - Silent abort returns ``None``; nothing is logged above DEBUG.
    - Rejected names raise ``ResourceNameError`` before any file is touched.
    - ``OSError`` from a write propagates unchanged; files written by
      earlier steps stay on disk.  Re-running the same command is the
      recovery path: step 5 overwrites and step 6 is idempotent per slug.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from expressgen.errors import (
    ConfigError,
    EntryPointError,
    ProjectRootError,
    ResourceNameError,
)
from expressgen.exporters import ExportResult, FileRecord, ProjectExporter
from expressgen.models import (
    GeneratorConfig,
    IdentifierForms,
    ProtectionChoice,
    ResourceSchema,
)
from expressgen.patcher import apply_patch
from expressgen.templates import SCAFFOLD_DIRECTORIES, TemplateGenerator
from expressgen.utils import Timer, derive_identifiers, load_data_file, read_file
from expressgen.validators import (
    ValidationResult,
    validate_config,
    validate_resource_name,
    validate_resource_schema,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("expressgen.generator")

CONFIG_FILE_NAMES: tuple = ("expressgen.yaml", "expressgen.yml", "expressgen.json")
PACKAGE_MANIFEST: str = "package.json"

ProtectArg = Union[ProtectionChoice, bool, str, None]


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """Outcome of one ``ResourceGenerator.generate()`` call."""

    resource: str = ""
    slug: str = ""
    symbol: str = ""
    protected: bool = False
    files: List[FileRecord] = field(default_factory=list)
    entry_point: str = ""
    entry_point_changed: bool = False
    warnings: List[str] = field(default_factory=list)
    dry_run: bool = False
    elapsed_seconds: float = 0.0

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        verb: str = "would be created" if self.dry_run else "created"
        lines.append(f'Resource "{self.slug}" {verb}.')
        for record in self.files:
            lines.append(f"  + {record.relative_path}")
        mount: str = "mounted at" if self.entry_point_changed else "already mounted at"
        lines.append(f"  ~ {self.entry_point} ({mount} /{self.slug})")
        for warn in self.warnings:
            lines.append(f"  ⚠ {warn}")
        return "\n".join(lines)


@dataclass(frozen=False, slots=True)
class ScaffoldReport:
    """Outcome of one ``ProjectScaffolder.scaffold()`` call."""

    root: str = ""
    files: List[FileRecord] = field(default_factory=list)
    created_directories: List[str] = field(default_factory=list)
    manifest_created: bool = False
    dry_run: bool = False
    elapsed_seconds: float = 0.0

    def summary(self) -> str:
        lines: List[str] = []
        verb: str = "would be initialised" if self.dry_run else "initialised"
        lines.append(f"Project {verb} in {self.root}.")
        for record in self.files:
            lines.append(f"  + {record.relative_path}")
        if self.manifest_created:
            lines.append(f"  (created a new {PACKAGE_MANIFEST})")
        lines.append("Next: run `npm install`, copy env.example to .env, then `npm run key:generate`.")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Loading helpers
# ---------------------------------------------------------------------------


def resolve_project_root(root: Union[str, Path, None]) -> Path:
    """
    Resolve and check the project root.

    Raises:
        ProjectRootError: If no root is given or it is not a directory.
    """
    if root is None or str(root) == "":
        raise ProjectRootError("No project folder given. Open or pass a project folder first.")
    path: Path = Path(root).expanduser().resolve()
    if not path.is_dir():
        raise ProjectRootError(f"Project folder not found: {path}")
    return path


def load_generator_config(
    root: Path,
    overrides: Optional[Dict[str, Any]] = None,
) -> GeneratorConfig:
    """
    Build a ``GeneratorConfig`` from ``<root>/expressgen.{yaml,yml,json}``
    (if present) plus *overrides*.

    Raises:
        ConfigError: If the file is unreadable or the values are invalid.
    """
    data: Dict[str, Any] = {}
    for name in CONFIG_FILE_NAMES:
        candidate: Path = root / name
        if candidate.is_file():
            loaded: Any = load_data_file(candidate)
            if loaded is None:
                loaded = {}
            if not isinstance(loaded, dict):
                raise ConfigError(
                    f"Expected a mapping at top level of {candidate}, "
                    f"got {type(loaded).__name__}."
                )
            data.update(loaded)
            logger.info("Loaded config file: %s (%d keys).", candidate, len(loaded))
            break

    if overrides:
        data.update(overrides)

    try:
        config: GeneratorConfig = GeneratorConfig.model_validate(data)
    except PydanticValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc

    result: ValidationResult = validate_config(config)
    for warn in result.warnings:
        logger.warning("%s", warn)
    if not result.is_valid:
        raise ConfigError(result.format_report())

    return config


def load_resource_schema(path: Path) -> ResourceSchema:
    """
    Load a column schema file: either ``{columns: [...]}`` or a bare list.

    Raises:
        ConfigError: If the file is unreadable or has the wrong shape.
    """
    data: Any = load_data_file(path)
    if isinstance(data, list):
        data = {"columns": data}
    if not isinstance(data, dict):
        raise ConfigError(f"Schema file {path} must hold a list or a 'columns' mapping.")
    try:
        return ResourceSchema.model_validate(data)
    except PydanticValidationError as exc:
        raise ConfigError(f"Invalid resource schema in {path}: {exc}") from exc


def coerce_protection(protect: ProtectArg) -> ProtectionChoice:
    """Accept a choice, a bool, a picker answer or ``None`` (cancelled)."""
    if isinstance(protect, ProtectionChoice):
        return protect
    if isinstance(protect, bool):
        return ProtectionChoice.PROTECT if protect else ProtectionChoice.UNPROTECT
    return ProtectionChoice.from_answer(protect)


# ---------------------------------------------------------------------------
# ResourceGenerator
# ---------------------------------------------------------------------------


class ResourceGenerator:
    """
    Appends a CRUD resource (route/controller/model) to a scaffolded project.

    Usage::

        generator = ResourceGenerator()
        report = generator.generate(Path("./my-api"), "Products", "Yes")
        if report is not None:
            print(report.summary())

    The generator is reusable and keeps no state between calls.
    """

    def __init__(self, config: Optional[GeneratorConfig] = None) -> None:
        self._config: GeneratorConfig = config or GeneratorConfig()
        self._templates: TemplateGenerator = TemplateGenerator(self._config)

    @property
    def config(self) -> GeneratorConfig:
        return self._config

    def generate(
        self,
        root: Union[str, Path],
        raw_name: Optional[str],
        protect: ProtectArg,
        schema: Optional[ResourceSchema] = None,
    ) -> Optional[GenerationReport]:
        """
        Run the resource pipeline.

        Returns:
            A ``GenerationReport``, or ``None`` when the name is empty or
            the protection choice was cancelled (nothing is touched).

        Raises:
            ProjectRootError: Root missing.
            ResourceNameError: Name or columns rejected by validation.
            EntryPointError: Entry point missing or without anchor.
            OSError: A write failed; earlier files remain.
        """
        project_root: Path = resolve_project_root(root)
        name: str = (raw_name or "").strip()
        choice: ProtectionChoice = coerce_protection(protect)

        if not name or choice is ProtectionChoice.CANCELLED:
            logger.debug(
                "Resource generation aborted (name=%r, choice=%s).", name, choice.value
            )
            return None

        start: float = time.perf_counter()
        schema = schema or self._config.default_schema()
        report: GenerationReport = GenerationReport(
            resource=name,
            protected=choice.is_protected,
            dry_run=self._config.dry_run,
        )

        if self._config.validate_names:
            report.warnings.extend(self._validate(name, schema))

        forms: IdentifierForms = derive_identifiers(name)
        report.slug = forms.slug
        report.symbol = forms.symbol
        logger.info(
            "Generating resource '%s' (slug=%s, symbol=%s, protected=%s).",
            name,
            forms.slug,
            forms.symbol,
            choice.is_protected,
        )

        with Timer("render resource"):
            files: Dict[str, str] = self._templates.generate_all_for_resource(
                forms, choice.is_protected, schema
            )

        exporter: ProjectExporter = ProjectExporter(
            project_root,
            atomic_writes=self._config.atomic_writes,
            dry_run=self._config.dry_run,
        )
        export: ExportResult = exporter.export(files)
        report.files.extend(export.files)

        report.entry_point = self._config.entry_point_relpath
        report.entry_point_changed = self._patch_entry_point(exporter, project_root, forms)

        report.elapsed_seconds = time.perf_counter() - start
        logger.info(
            "Resource '%s' done in %.3fs (entry point %s).",
            forms.slug,
            report.elapsed_seconds,
            "patched" if report.entry_point_changed else "unchanged",
        )
        return report

    # -----------------------------------------------------------------
    # Internal steps
    # -----------------------------------------------------------------

    def _validate(self, name: str, schema: ResourceSchema) -> List[str]:
        """Raise on errors; return warning messages."""
        result: ValidationResult = validate_resource_name(name)
        result.merge(validate_resource_schema(schema))

        if not result.is_valid:
            for err in result.errors:
                logger.error("  ✗ %s", err)
            raise ResourceNameError(name, result)

        for warn in result.warnings:
            logger.warning("  ⚠ %s", warn)
        return [w.message for w in result.warnings]

    def _patch_entry_point(
        self,
        exporter: ProjectExporter,
        project_root: Path,
        forms: IdentifierForms,
    ) -> bool:
        """Read, patch and rewrite the entry point; returns True if it changed."""
        entry_path: Path = self._config.entry_point_path(project_root)
        if not entry_path.is_file():
            raise EntryPointError(
                f"Entry point not found: {entry_path}. Run `expressgen init` first."
            )

        original: str = read_file(entry_path)
        patched: str = apply_patch(
            original,
            forms.slug,
            self._config.patch_strategy,
            self._config.anchor_marker,
        )

        if patched == original:
            logger.debug("Entry point already mounts '%s'.", forms.slug)
            return False

        exporter.write_one(self._config.entry_point_relpath, patched)
        return True


# ---------------------------------------------------------------------------
# ProjectScaffolder
# ---------------------------------------------------------------------------


class ProjectScaffolder:
    """
    Lays down the Express project skeleton and edits ``package.json``.

    Re-running is safe: boilerplate is overwritten with identical content
    and the manifest edit is idempotent.
    """

    def __init__(self, config: Optional[GeneratorConfig] = None) -> None:
        self._config: GeneratorConfig = config or GeneratorConfig()
        self._templates: TemplateGenerator = TemplateGenerator(self._config)

    def scaffold(self, root: Union[str, Path]) -> ScaffoldReport:
        """
        Run the scaffold pipeline.

        Raises:
            ProjectRootError: Root missing.
            ConfigError: Existing ``package.json`` is not valid JSON.
            OSError: A write failed.
        """
        project_root: Path = resolve_project_root(root)
        report: ScaffoldReport = ScaffoldReport(
            root=str(project_root), dry_run=self._config.dry_run
        )
        start: float = time.perf_counter()

        # Read the manifest before touching disk so bad JSON leaves no skeleton.
        manifest, created = self._load_manifest(project_root)

        exporter: ProjectExporter = ProjectExporter(
            project_root,
            atomic_writes=self._config.atomic_writes,
            dry_run=self._config.dry_run,
        )

        src: str = self._config.src_dir
        directories: List[str] = [src] + [f"{src}/{d}" for d in SCAFFOLD_DIRECTORIES]
        export: ExportResult = exporter.export(
            self._templates.generate_scaffold_files(), directories
        )
        report.files.extend(export.files)
        report.created_directories.extend(export.created_directories)

        updated: Dict[str, Any] = self._templates.update_package_manifest(manifest)
        report.files.append(
            exporter.write_one(PACKAGE_MANIFEST, json.dumps(updated, indent=2) + "\n")
        )
        report.manifest_created = created

        report.elapsed_seconds = time.perf_counter() - start
        logger.info(
            "Scaffolded %s: %d files, %d new directories in %.3fs.",
            project_root,
            len(report.files),
            len(report.created_directories),
            report.elapsed_seconds,
        )
        return report

    def _load_manifest(self, project_root: Path) -> "tuple[Dict[str, Any], bool]":
        path: Path = project_root / PACKAGE_MANIFEST
        if not path.is_file():
            logger.info("No %s found, creating one.", PACKAGE_MANIFEST)
            return self._templates.new_package_manifest(project_root.name), True

        try:
            data: Any = json.loads(read_file(path))
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Expected a JSON object in {path}.")
        return data, False


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ResourceGenerator",
    "ProjectScaffolder",
    "GenerationReport",
    "ScaffoldReport",
    "resolve_project_root",
    "load_generator_config",
    "load_resource_schema",
    "coerce_protection",
    "CONFIG_FILE_NAMES",
]

logger.debug("expressgen.generator loaded.")
