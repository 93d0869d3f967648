# File: expressgen/patcher.py
"""
ExpressGen - Entry-Point Patcher
==================================

Mounts a generated resource in ``src/index.js`` by inserting two lines
around the anchor comment::

    const productsRoutes = require('./routes/productsRoutes');   ← before
    // Add generated routes here                                  ← anchor
    app.use('/products', productsRoutes);                         ← after

Two strategies are available:

``literal`` (default)
    ``patch_entry_point`` checks each line by exact substring containment
    and inserts only what is missing.  A hand-edited line (extra spaces,
    double quotes, ...) is no longer an exact match, so the next run adds a
    second copy.  That boundary is intentional and kept as is.

``ledger``
    ``RouteLedger`` owns a block delimited by ``LEDGER_BEGIN`` /
    ``LEDGER_END`` around the anchor.  Every line in the block is parsed
    and keyed by the ``<slug>Routes`` variable it declares or mounts.  Lines
    already in the block are written back verbatim, so a custom prefix
    (``app.use('/api/products', productsRoutes)``) survives; only a missing
    import or mount is added in canonical form.

Both functions are pure: text in, text out.  The file's newline style
(``\\n`` or ``\\r\\n``) is kept.  File I/O lives in the generator.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from expressgen.errors import EntryPointError
from expressgen.models import DEFAULT_ANCHOR_MARKER, IdentifierForms, PatchStrategy
from expressgen.utils import derive_identifiers

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("expressgen.patcher")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

LEDGER_BEGIN: str = "// expressgen:routes:begin"
LEDGER_END: str = "// expressgen:routes:end"

# The slug is read from the routes variable, never from a path or URL.
_IMPORT_RE: re.Pattern[str] = re.compile(
    r"""^\s*(?:const|let|var)\s+(?P<slug>[A-Za-z_$][A-Za-z0-9_$]*?)Routes\s*=\s*
        require\(\s*(?P<q>['"])[^'"]+(?P=q)\s*\)
        \s*;?\s*$""",
    re.VERBOSE,
)
_MOUNT_RE: re.Pattern[str] = re.compile(
    r"""^\s*app\.use\(\s*(?P<q>['"])/[^'"]*(?P=q)\s*,
        \s*(?P<slug>[A-Za-z_$][A-Za-z0-9_$]*?)Routes\s*\)\s*;?\s*$""",
    re.VERBOSE,
)


def detect_newline(text: str) -> str:
    """``"\\r\\n"`` when the text uses Windows line endings, else ``"\\n"``."""
    return "\r\n" if "\r\n" in text else "\n"


# ---------------------------------------------------------------------------
# Canonical lines
# ---------------------------------------------------------------------------


def import_line(forms: IdentifierForms) -> str:
    """``const <slug>Routes = require('./routes/<slug>Routes');``"""
    return f"const {forms.routes_var} = require('./routes/{forms.module_name('route')}');"


def mount_line(forms: IdentifierForms) -> str:
    """``app.use('/<slug>', <slug>Routes);``"""
    return f"app.use('{forms.url_path}', {forms.routes_var});"


# ---------------------------------------------------------------------------
# Literal strategy
# ---------------------------------------------------------------------------


def patch_entry_point(
    text: str,
    slug: str,
    anchor: str = DEFAULT_ANCHOR_MARKER,
) -> str:
    """
    Insert the import line before and the mount line after *anchor*.

    Each line is inserted only when it is not already a literal substring
    of *text*; the two checks are independent.

    Raises:
        EntryPointError: If an insertion is needed and *anchor* is absent.
    """
    forms: IdentifierForms = derive_identifiers(slug)
    imp: str = import_line(forms)
    mount: str = mount_line(forms)
    need_import: bool = imp not in text
    need_mount: bool = mount not in text

    if (need_import or need_mount) and anchor not in text:
        raise EntryPointError(f"Anchor comment {anchor!r} not found in entry point.")

    nl: str = detect_newline(text)
    patched: str = text
    if need_import:
        patched = patched.replace(anchor, f"{imp}{nl}{anchor}", 1)
    if need_mount:
        patched = patched.replace(anchor, f"{anchor}{nl}{mount}", 1)

    logger.debug(
        "Literal patch for '%s': import %s, mount %s.",
        slug,
        "added" if need_import else "present",
        "added" if need_mount else "present",
    )
    return patched


# ---------------------------------------------------------------------------
# Ledger strategy
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class RouteRecord:
    """
    All block lines belonging to one ``<slug>Routes`` variable.

    ``imports`` and ``mounts`` hold the lines exactly as found in the file
    (indentation included), or canonical lines added by ``RouteLedger.add``.
    """

    slug: str
    imports: List[str] = field(default_factory=list)
    mounts: List[str] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return bool(self.imports) and bool(self.mounts)


def _find_line(lines: List[str], marker: str, start: int = 0) -> Optional[int]:
    for idx in range(start, len(lines)):
        if lines[idx].strip() == marker:
            return idx
    return None


class RouteLedger:
    """
    Structured view of the routes mounted around the anchor.

    Usage::

        ledger = RouteLedger.parse(text)
        ledger.add("products")
        text = ledger.render()
    """

    def __init__(
        self,
        head: List[str],
        tail: List[str],
        records: List[RouteRecord],
        anchor: str,
        indent: str = "",
        newline: str = "\n",
    ) -> None:
        self._head: List[str] = head
        self._tail: List[str] = tail
        self._records: List[RouteRecord] = records
        self._anchor: str = anchor
        self._indent: str = indent
        self._newline: str = newline

    # -----------------------------------------------------------------
    # Parsing
    # -----------------------------------------------------------------

    @classmethod
    def parse(cls, text: str, anchor: str = DEFAULT_ANCHOR_MARKER) -> "RouteLedger":
        """
        Parse the managed block (or adopt the lines next to a bare anchor).

        Raises:
            EntryPointError: If the anchor is missing, the block markers are
                out of order, or the block holds an unrecognised line.
        """
        newline: str = detect_newline(text)
        lines: List[str] = text.split(newline)
        anchor_idx: Optional[int] = _find_line(lines, anchor)
        if anchor_idx is None:
            raise EntryPointError(f"Anchor comment {anchor!r} not found in entry point.")

        anchor_line: str = lines[anchor_idx]
        indent: str = anchor_line[: len(anchor_line) - len(anchor_line.lstrip())]
        begin_idx: Optional[int] = _find_line(lines, LEDGER_BEGIN)
        end_idx: Optional[int] = _find_line(lines, LEDGER_END)

        if begin_idx is None and end_idx is None:
            start, stop, above, below = cls._adopt_bare_anchor(lines, anchor_idx)
        elif begin_idx is not None and end_idx is not None and begin_idx < anchor_idx < end_idx:
            start, stop = begin_idx, end_idx + 1
            above = lines[begin_idx + 1 : anchor_idx]
            below = lines[anchor_idx + 1 : end_idx]
        else:
            raise EntryPointError(
                f"Malformed route block: expected {LEDGER_BEGIN!r}, the anchor "
                f"and {LEDGER_END!r} in that order."
            )

        records: List[RouteRecord] = cls._records_from(above, below)
        logger.debug(
            "Parsed route ledger: %d record(s) %s.",
            len(records),
            "from block" if begin_idx is not None else "adopted from bare anchor",
        )
        return cls(lines[:start], lines[stop:], records, anchor, indent, newline)

    @staticmethod
    def _adopt_bare_anchor(
        lines: List[str], anchor_idx: int
    ) -> Tuple[int, int, List[str], List[str]]:
        """Take contiguous import lines above and mount lines below the anchor."""
        start: int = anchor_idx
        while start > 0 and _IMPORT_RE.match(lines[start - 1]):
            start -= 1
        stop: int = anchor_idx + 1
        while stop < len(lines) and _MOUNT_RE.match(lines[stop]):
            stop += 1
        return start, stop, lines[start:anchor_idx], lines[anchor_idx + 1 : stop]

    @staticmethod
    def _records_from(above: List[str], below: List[str]) -> List[RouteRecord]:
        """
        Group block lines by slug, in order of first appearance.

        Imports are expected above the anchor and mounts below it; each
        mount list is stored oldest first, the reverse of its file order.
        """
        by_slug: Dict[str, RouteRecord] = {}

        def _record(slug: str) -> RouteRecord:
            if slug not in by_slug:
                by_slug[slug] = RouteRecord(slug)
            return by_slug[slug]

        for line in above:
            if not line.strip():
                continue
            match = _IMPORT_RE.match(line)
            if match is None:
                raise EntryPointError(
                    f"Unrecognised line above the anchor in route block: {line.strip()!r}"
                )
            _record(match.group("slug")).imports.append(line)

        for line in reversed(below):
            if not line.strip():
                continue
            match = _MOUNT_RE.match(line)
            if match is None:
                raise EntryPointError(
                    f"Unrecognised line below the anchor in route block: {line.strip()!r}"
                )
            _record(match.group("slug")).mounts.insert(0, line)

        return list(by_slug.values())

    # -----------------------------------------------------------------
    # Mutation & rendering
    # -----------------------------------------------------------------

    @property
    def slugs(self) -> List[str]:
        return [r.slug for r in self._records]

    def __contains__(self, slug: object) -> bool:
        return slug in self.slugs

    def __len__(self) -> int:
        return len(self._records)

    def add(self, slug: str) -> bool:
        """
        Make sure *slug* is imported and mounted.

        Returns False when nothing had to be added.  Existing lines are
        never rewritten; only a missing import or mount is filled in.
        """
        forms: IdentifierForms = derive_identifiers(slug)
        record: Optional[RouteRecord] = next(
            (r for r in self._records if r.slug == forms.slug), None
        )
        if record is None:
            record = RouteRecord(forms.slug)
            self._records.append(record)
        if record.is_complete:
            return False

        if not record.imports:
            record.imports.append(f"{self._indent}{import_line(forms)}")
        if not record.mounts:
            record.mounts.append(f"{self._indent}{mount_line(forms)}")
        return True

    def render(self) -> str:
        """
        Serialise back to text.

        Imports are listed oldest first above the anchor and mounts newest
        first below it, the same layout the literal strategy produces.
        """
        ind: str = self._indent
        block: List[str] = [f"{ind}{LEDGER_BEGIN}"]
        for record in self._records:
            block.extend(record.imports)
        block.append(f"{ind}{self._anchor}")
        for record in reversed(self._records):
            block.extend(reversed(record.mounts))
        block.append(f"{ind}{LEDGER_END}")
        return self._newline.join(self._head + block + self._tail)


def patch_with_ledger(
    text: str,
    slug: str,
    anchor: str = DEFAULT_ANCHOR_MARKER,
) -> str:
    """Ledger-strategy counterpart of ``patch_entry_point``."""
    ledger: RouteLedger = RouteLedger.parse(text, anchor)
    added: bool = ledger.add(slug)
    logger.debug("Ledger patch for '%s': %s.", slug, "added" if added else "present")
    return ledger.render()


def apply_patch(
    text: str,
    slug: str,
    strategy: str = PatchStrategy.LITERAL,
    anchor: str = DEFAULT_ANCHOR_MARKER,
) -> str:
    """Dispatch to the configured strategy."""
    if strategy == PatchStrategy.LEDGER:
        return patch_with_ledger(text, slug, anchor)
    return patch_entry_point(text, slug, anchor)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "LEDGER_BEGIN",
    "LEDGER_END",
    "detect_newline",
    "import_line",
    "mount_line",
    "patch_entry_point",
    "RouteRecord",
    "RouteLedger",
    "patch_with_ledger",
    "apply_patch",
]

logger.debug("expressgen.patcher loaded.")
