# File: expressgen/cli.py
"""
ExpressGen - Command-Line Interface
=====================================

Built on the standard-library ``argparse`` module.

Usage examples::

    # Lay down the Express skeleton in the current folder
    expressgen init

    # Add a protected CRUD resource
    expressgen add Products --protect

    # Prompt for anything not given on the command line
    expressgen add

    # Custom columns, managed route block, nothing written
    expressgen add orders --no-protect --columns item,qty --strategy ledger --dry-run

Exit codes:
    0 - success (also a cancelled prompt or empty name)
    1 - validation error
    2 - generation / entry-point error
    3 - file-system error
    4 - input/argument error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from expressgen.errors import (
    ConfigError,
    EntryPointError,
    ProjectRootError,
    ResourceNameError,
)
from expressgen.models import GeneratorConfig, PatchStrategy, ProtectionChoice, ResourceSchema

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("expressgen")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_VALIDATION_ERROR: int = 1
EXIT_GENERATION_ERROR: int = 2
EXIT_EXPORT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4

NAME_PROMPT: str = "Resource name (e.g. products): "
PROTECT_PROMPT: str = "Protect with JWT middleware? [Yes/No]: "


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the root expressgen logger based on verbosity level.

    Args:
        verbosity: -1 (quiet) = ERROR, 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity < 0:
        level = logging.ERROR
    elif verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    fmt: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
    formatter: logging.Formatter = logging.Formatter(fmt, datefmt="%H:%M:%S")
    handler.setFormatter(formatter)

    root_logger: logging.Logger = logging.getLogger("expressgen")
    root_logger.setLevel(level)

    # Remove existing handlers to prevent duplication
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--root",
        type=str,
        default=".",
        metavar="DIR",
        help="Project folder (default: current directory).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Render everything but write nothing.",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from expressgen import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="expressgen",
        description=(
            "ExpressGen: scaffold an Express + MySQL + JWT API and add "
            "CRUD resources to it."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s init --root ./my-api\n"
            "  %(prog)s add Products --protect --root ./my-api\n"
            "  %(prog)s add orders --no-protect --columns item,qty\n"
        ),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"ExpressGen v{__version__}",
    )

    # --- Verbosity ---
    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Only report errors.",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    # --- init ---
    init_parser = subparsers.add_parser(
        "init", help="Create the project skeleton and update package.json."
    )
    _add_common_arguments(init_parser)

    # --- add ---
    add_parser = subparsers.add_parser(
        "add", help="Generate a CRUD resource and mount it in src/index.js."
    )
    add_parser.add_argument(
        "name",
        nargs="?",
        default=None,
        help="Resource name, e.g. 'products' (prompted for when omitted).",
    )
    protect_group = add_parser.add_mutually_exclusive_group()
    protect_group.add_argument(
        "--protect",
        dest="protect",
        action="store_const",
        const=True,
        default=None,
        help="Guard every route with the JWT middleware.",
    )
    protect_group.add_argument(
        "--no-protect",
        dest="protect",
        action="store_const",
        const=False,
        help="Leave the routes public.",
    )
    schema_group = add_parser.add_mutually_exclusive_group()
    schema_group.add_argument(
        "--columns",
        type=str,
        default=None,
        metavar="A,B,C",
        help="Writable columns for INSERT/UPDATE (default: name,email,address).",
    )
    schema_group.add_argument(
        "--schema",
        type=str,
        default=None,
        metavar="FILE",
        help="YAML/JSON file holding the column list.",
    )
    add_parser.add_argument(
        "--strategy",
        type=str,
        default=None,
        choices=[s.value for s in PatchStrategy],
        help="Entry-point patch strategy (default: literal).",
    )
    add_parser.add_argument(
        "--no-validate",
        action="store_true",
        default=False,
        help="Skip resource-name validation.",
    )
    _add_common_arguments(add_parser)

    return parser


# ---------------------------------------------------------------------------
# Prompts & overrides
# ---------------------------------------------------------------------------


def _prompt(question: str) -> Optional[str]:
    """Ask on stdin; ``None`` when the prompt is dismissed (EOF / Ctrl-C)."""
    try:
        return input(question)
    except (EOFError, KeyboardInterrupt):
        print(file=sys.stderr)
        return None


def _build_config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Build a config override dictionary from CLI arguments."""
    overrides: Dict[str, Any] = {}

    if args.dry_run:
        overrides["dry_run"] = True

    if getattr(args, "strategy", None) is not None:
        overrides["patch_strategy"] = args.strategy

    if getattr(args, "no_validate", False):
        overrides["validate_names"] = False

    return overrides


def _load_config(root: Path, args: argparse.Namespace) -> GeneratorConfig:
    from expressgen.generator import load_generator_config

    return load_generator_config(root, _build_config_overrides(args))


def _load_schema(args: argparse.Namespace) -> Optional[ResourceSchema]:
    from expressgen.generator import load_resource_schema

    if args.columns is not None:
        try:
            return ResourceSchema.from_csv(args.columns)
        except PydanticValidationError as exc:
            raise ConfigError(f"Invalid --columns value {args.columns!r}: {exc}") from exc
    if args.schema is not None:
        return load_resource_schema(Path(args.schema))
    return None


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _run_init(args: argparse.Namespace) -> int:
    """Action 1: scaffold. Returns the exit code."""
    from expressgen.generator import ProjectScaffolder, resolve_project_root

    try:
        root: Path = resolve_project_root(args.root)
        config: GeneratorConfig = _load_config(root, args)
    except (ProjectRootError, ConfigError) as exc:
        logger.error("%s", exc)
        return EXIT_INPUT_ERROR

    try:
        report = ProjectScaffolder(config).scaffold(root)
    except ConfigError as exc:
        logger.error("%s", exc)
        return EXIT_INPUT_ERROR
    except OSError as exc:
        logger.error("File-system error: %s", exc)
        return EXIT_EXPORT_ERROR

    print(report.summary())
    return EXIT_SUCCESS


def _run_add(args: argparse.Namespace) -> int:
    """Action 2: generate a resource. Returns the exit code."""
    from expressgen.generator import ResourceGenerator, resolve_project_root

    try:
        root: Path = resolve_project_root(args.root)
        config: GeneratorConfig = _load_config(root, args)
        schema: Optional[ResourceSchema] = _load_schema(args)
    except (ProjectRootError, ConfigError) as exc:
        logger.error("%s", exc)
        return EXIT_INPUT_ERROR

    name: Optional[str] = args.name if args.name is not None else _prompt(NAME_PROMPT)
    if not name or not name.strip():
        return EXIT_SUCCESS

    if args.protect is None:
        choice: ProtectionChoice = ProtectionChoice.from_answer(_prompt(PROTECT_PROMPT))
    else:
        choice = ProtectionChoice.PROTECT if args.protect else ProtectionChoice.UNPROTECT

    try:
        report = ResourceGenerator(config).generate(root, name, choice, schema)
    except ResourceNameError as exc:
        logger.error("%s", exc)
        return EXIT_VALIDATION_ERROR
    except EntryPointError as exc:
        logger.error("%s", exc)
        return EXIT_GENERATION_ERROR
    except OSError as exc:
        logger.error("File-system error: %s", exc)
        return EXIT_EXPORT_ERROR

    if report is not None:
        print(report.summary())
    return EXIT_SUCCESS


_COMMANDS = {
    "init": _run_init,
    "add": _run_add,
}


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def run(argv: Optional[Sequence[str]] = None) -> int:
    """Parse *argv*, run the command and return its exit code."""
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    verbosity: int = -1 if args.quiet else args.verbose
    _setup_logging(verbosity)
    logger.info("Command: %s (root=%s)", args.command, args.root)

    exit_code: int = _COMMANDS[args.command](args)
    if exit_code != EXIT_SUCCESS:
        logger.debug("'%s' failed with exit code %d.", args.command, exit_code)
    return exit_code


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.
    """
    sys.exit(run(argv))


def main() -> None:
    """Console-script entry point."""
    cli_main()


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "main",
    "run",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_ERROR",
    "EXIT_GENERATION_ERROR",
    "EXIT_EXPORT_ERROR",
    "EXIT_INPUT_ERROR",
]

logger.debug("expressgen.cli loaded.")
