# File: expressgen/__main__.py
"""
ExpressGen - Module entry point.

Allows running the generator directly via::

    python -m expressgen add products --protect

This module simply delegates to the CLI entry point defined in ``expressgen.cli``.
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from expressgen.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()
