# File: expressgen/exporters.py
"""
ExpressGen - Project Exporter (File-System Writer)
====================================================

Responsible for:
    1. Creating directories under the project root.
    2. Writing generated files, each one atomically (temp file + rename).
    3. Returning a ``FileRecord`` per file with size, line count and checksum.

Files are written **in order** and there is no rollback: if the third
write fails, the first two stay on disk and the ``OSError`` propagates to
the caller.  Re-running the generator is the recovery path since every
write is a plain overwrite.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List

from expressgen.utils import (
    Timer,
    count_lines,
    ensure_directory,
    sha256_hex,
    write_file,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("expressgen.exporters")


# ---------------------------------------------------------------------------
# Data classes for export results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Immutable record of a single exported file."""

    relative_path: str
    absolute_path: str
    size_bytes: int
    line_count: int
    sha256: str
    written: bool = True


@dataclass(frozen=False, slots=True)
class ExportResult:
    """What ``ProjectExporter.export()`` did."""

    files: List[FileRecord] = field(default_factory=list)
    created_directories: List[str] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def total_bytes(self) -> int:
        return sum(r.size_bytes for r in self.files)

    @property
    def total_lines(self) -> int:
        return sum(r.line_count for r in self.files)


# ---------------------------------------------------------------------------
# ProjectExporter class
# ---------------------------------------------------------------------------


class ProjectExporter:
    """
    Writes generated files under a project root.

    Usage::

        exporter = ProjectExporter(Path("./my-api"))
        result = exporter.export({"src/routes/productsRoutes.js": "..."})

    Thread-safety: NOT thread-safe.  Two exporters writing the same file
    race with last-write-wins.
    """

    def __init__(
        self,
        root: Path,
        *,
        atomic_writes: bool = True,
        dry_run: bool = False,
    ) -> None:
        """
        Args:
            root: Project root; relative paths are resolved against it.
            atomic_writes: If True, use write-to-temp+rename.
            dry_run: If True, compute records but touch nothing.
        """
        self._root: Path = root
        self._atomic_writes: bool = atomic_writes
        self._dry_run: bool = dry_run

        logger.debug(
            "ProjectExporter initialised: root=%s, atomic=%s, dry_run=%s.",
            self._root,
            self._atomic_writes,
            self._dry_run,
        )

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def create_directories(self, relative_dirs: Iterable[str]) -> List[str]:
        """Create directories under the root; returns the ones that were new."""
        created: List[str] = []
        for rel_dir in relative_dirs:
            dir_path: Path = self._root / rel_dir
            if self._dry_run:
                if not dir_path.is_dir():
                    created.append(rel_dir)
                continue
            if ensure_directory(dir_path):
                created.append(rel_dir)
        return created

    def export(
        self,
        files: Dict[str, str],
        directories: Iterable[str] = (),
    ) -> ExportResult:
        """
        Write every file in *files* (relative_path → content), in order.

        Raises:
            OSError: From the first write that fails; earlier files remain.
        """
        result: ExportResult = ExportResult()

        with Timer("export") as timer:
            result.created_directories = self.create_directories(directories)
            for rel_path, content in files.items():
                result.files.append(self.write_one(rel_path, content))

        result.elapsed_seconds = timer.elapsed
        logger.info(
            "%s %d file(s), %d lines, %d bytes under %s in %.3fs.",
            "Rendered" if self._dry_run else "Wrote",
            len(result.files),
            result.total_lines,
            result.total_bytes,
            self._root,
            timer.elapsed,
        )
        return result

    def write_one(self, rel_path: str, content: str) -> FileRecord:
        """Write a single file and return its record."""
        full_path: Path = self._root / rel_path

        if self._dry_run:
            size_bytes: int = len(content.encode("utf-8"))
        else:
            try:
                size_bytes = write_file(full_path, content, atomic=self._atomic_writes)
            except OSError as exc:
                logger.error("Failed to write %s: %s", rel_path, exc)
                raise

        logger.debug("%s %s (%d bytes).", "Rendered" if self._dry_run else "Wrote", rel_path, size_bytes)

        return FileRecord(
            relative_path=rel_path,
            absolute_path=str(full_path),
            size_bytes=size_bytes,
            line_count=count_lines(content),
            sha256=sha256_hex(content),
            written=not self._dry_run,
        )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ProjectExporter",
    "ExportResult",
    "FileRecord",
]

logger.debug("expressgen.exporters loaded.")
