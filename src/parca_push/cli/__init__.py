"""Command-line interface for parca-push (Click-based)."""

from __future__ import annotations

import sys
from typing import Optional, Sequence

import click

from ._console import error
from .push import push


def main(argv: Optional[Sequence[str]] = None) -> None:
    """CLI entry point for console scripts.

    Every failure, usage errors included, exits with status 1.
    """
    try:
        push.main(args=argv, prog_name="parca-push", standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        sys.exit(1)
    except click.Abort:
        error("Aborted!")
        sys.exit(1)


__all__ = ["main", "push"]
