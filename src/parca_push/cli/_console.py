"""Console output helpers shared by CLI commands."""

from __future__ import annotations

import click


def error(message: str) -> None:
    click.secho(message, fg="red", err=True)


__all__ = ["error"]
