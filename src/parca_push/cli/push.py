"""Push a pprof profile to a remote profile store."""

from __future__ import annotations

from typing import Dict, Iterable, Optional

import click

from ..core.errors import ConfigurationError, PushError
from ..core.types import PushConfig, RemoteStoreConfig
from ..execution import run
from ._logging import LOG_LEVELS, setup_logging


def parse_labels(values: Iterable[str]) -> Dict[str, str]:
    """Parse ``name=value`` pairs; several pairs may share one value separated by ``;``."""
    collected: Dict[str, str] = {}
    for item in values:
        for piece in item.split(";"):
            if not piece:
                continue
            key, sep, raw = piece.partition("=")
            if not sep or not key:
                raise ConfigurationError(f"expected NAME=VALUE, got {piece!r}")
            collected[key] = raw
    return collected


def _collect_labels(ctx, param, values):
    try:
        return parse_labels(values)
    except ConfigurationError as exc:
        raise click.BadParameter(str(exc), ctx=ctx, param=param) from exc


def build_config(
    path: str,
    labels: Dict[str, str],
    normalized: bool,
    override_timestamp: bool,
    address: str,
    bearer_token: Optional[str],
    bearer_token_file: Optional[str],
    insecure: bool,
    insecure_skip_verify: bool,
) -> PushConfig:
    if not path:
        raise ConfigurationError("a profile path or '-' is required")
    if not address:
        raise ConfigurationError("--remote-store-address must not be empty")
    if bearer_token and bearer_token_file:
        raise ConfigurationError(
            "--remote-store-bearer-token and --remote-store-bearer-token-file are mutually exclusive"
        )
    return PushConfig(
        path=path,
        labels=labels,
        normalized=normalized,
        override_timestamp=override_timestamp,
        remote_store=RemoteStoreConfig(
            address=address,
            bearer_token=bearer_token or None,
            bearer_token_file=bearer_token_file or None,
            insecure=insecure,
            insecure_skip_verify=insecure_skip_verify,
        ),
    )


@click.command(help="Send a pprof profile to a Parca-compatible profile store.")
@click.argument("path", metavar="PATH")
@click.option(
    "-l",
    "--labels",
    multiple=True,
    callback=_collect_labels,
    help="Labels to attach to the profile data. For example --labels=__name__=process_cpu --labels=node=foo",
)
@click.option(
    "--normalized",
    is_flag=True,
    default=False,
    help="Whether the profile sample addresses are already normalized by the mapping offset.",
)
@click.option(
    "--override-timestamp",
    is_flag=True,
    default=False,
    help="Update the timestamp in the pprof profile to be the current time.",
)
@click.option(
    "--remote-store-address",
    required=True,
    help="gRPC address to send profiles to.",
)
@click.option("--remote-store-bearer-token", help="Bearer token to authenticate with store.")
@click.option(
    "--remote-store-bearer-token-file",
    type=click.Path(dir_okay=False),
    help="File to read bearer token from to authenticate with store.",
)
@click.option(
    "--remote-store-insecure",
    is_flag=True,
    help="Send gRPC requests via plaintext instead of TLS.",
)
@click.option(
    "--remote-store-insecure-skip-verify",
    is_flag=True,
    help="Skip TLS certificate verification.",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="warning",
    show_default=True,
    help="Verbosity of log output on stderr.",
)
def push(
    path: str,
    labels: Dict[str, str],
    normalized: bool,
    override_timestamp: bool,
    remote_store_address: str,
    remote_store_bearer_token: str | None,
    remote_store_bearer_token_file: str | None,
    remote_store_insecure: bool,
    remote_store_insecure_skip_verify: bool,
    log_level: str,
) -> None:
    """Read, optionally rewrite and upload a single profile."""
    setup_logging(log_level)
    try:
        config = build_config(
            path,
            labels,
            normalized,
            override_timestamp,
            remote_store_address,
            remote_store_bearer_token,
            remote_store_bearer_token_file,
            remote_store_insecure,
            remote_store_insecure_skip_verify,
        )
        run(config)
    except PushError as exc:
        raise click.ClickException(str(exc)) from exc


__all__ = ["build_config", "parse_labels", "push"]
