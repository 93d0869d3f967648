# File: expressgen/__init__.py
"""
ExpressGen - Express API Scaffolder & CRUD Resource Generator
===============================================================

Lays down a Node.js Express + MySQL + JWT project skeleton and appends
CRUD resources to it: a route, a controller and a model file per resource,
mounted in ``src/index.js`` through an anchor comment.

Architecture overview::

    ┌──────────────┐     ┌──────────────────┐     ┌──────────────────┐
    │  CLI / Entry │────▶│ ResourceGenerator │────▶│ TemplateGenerator│
    │   (cli.py)   │     │ ProjectScaffolder │     │  (templates.py)  │
    └──────────────┘     │  (generator.py)   │     └──────────────────┘
                         └─────────┬────────┘
                   ┌───────────┬───┴───────┬───────────┐
                   ▼           ▼           ▼           ▼
             ┌──────────┐ ┌─────────┐ ┌─────────┐ ┌──────────┐
             │validators│ │ models  │ │ patcher │ │exporters │
             └──────────┘ └─────────┘ └─────────┘ └──────────┘

Usage::

    # As a library
    from expressgen import ProjectScaffolder, ResourceGenerator
    ProjectScaffolder().scaffold("./my-api")
    ResourceGenerator().generate("./my-api", "Products", "Yes")

    # From the command line
    expressgen init --root ./my-api
    expressgen add Products --protect --root ./my-api
"""

from __future__ import annotations

__version__: str = "0.1.0"
__license__: str = "MIT"

from expressgen.errors import (
    ConfigError,
    EntryPointError,
    ExpressGenError,
    ProjectRootError,
    ResourceNameError,
)
from expressgen.models import (
    DEFAULT_ANCHOR_MARKER,
    GeneratorConfig,
    IdentifierForms,
    PatchStrategy,
    ProtectionChoice,
    ResourceSchema,
)
from expressgen.validators import (
    ValidationResult,
    validate_resource_name,
    validate_resource_schema,
)
from expressgen.utils import Timer, derive_identifiers
from expressgen.templates import TemplateGenerator
from expressgen.patcher import RouteLedger, apply_patch, patch_entry_point
from expressgen.exporters import ExportResult, FileRecord, ProjectExporter
from expressgen.generator import (
    GenerationReport,
    ProjectScaffolder,
    ResourceGenerator,
    ScaffoldReport,
    load_generator_config,
    load_resource_schema,
)

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    "__version__",
    "__license__",
    # Orchestrators
    "ResourceGenerator",
    "ProjectScaffolder",
    "GenerationReport",
    "ScaffoldReport",
    "load_generator_config",
    "load_resource_schema",
    # Errors
    "ExpressGenError",
    "ProjectRootError",
    "ConfigError",
    "EntryPointError",
    "ResourceNameError",
    # Models
    "DEFAULT_ANCHOR_MARKER",
    "GeneratorConfig",
    "IdentifierForms",
    "PatchStrategy",
    "ProtectionChoice",
    "ResourceSchema",
    # Validation
    "ValidationResult",
    "validate_resource_name",
    "validate_resource_schema",
    # Templates & patching
    "TemplateGenerator",
    "RouteLedger",
    "apply_patch",
    "patch_entry_point",
    # Exporters
    "ProjectExporter",
    "ExportResult",
    "FileRecord",
    # Utilities
    "Timer",
    "derive_identifiers",
]
