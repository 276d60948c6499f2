"""Push pipeline orchestration.

The upload runs as one asyncio task next to a termination-signal watcher.
Whichever finishes first cancels the other; the upload's outcome is the
outcome of the process.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import Awaitable, Optional, Sequence, TypeVar

from ..core.errors import Interrupted
from ..core.types import PushConfig
from ..pprof import prepare_profile, read_profile
from ..remote import ClientMetrics, build_channel, build_write_request, upload

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)


async def push(config: PushConfig, metrics: Optional[ClientMetrics] = None) -> None:
    """Read, optionally rewrite and upload the profile described by ``config``."""
    labels = dict(config.labels)
    metrics = metrics if metrics is not None else ClientMetrics()

    channel = await build_channel(config.remote_store, metrics)
    async with channel:
        source = "stdin" if config.reads_stdin else config.path
        logger.info("Reading profile from %s", source)
        raw_profile = await asyncio.to_thread(read_profile, config.path)
        raw_profile = prepare_profile(raw_profile, config.override_timestamp)

        request = build_write_request(labels, raw_profile, config.normalized)
        logger.info("Sending profile to %s with labels %s", config.remote_store.address, labels)
        await upload(channel, request)


async def supervise(job: Awaitable[T], signals: Sequence[signal.Signals] = DEFAULT_SIGNALS) -> T:
    """Run ``job`` until it finishes or one of ``signals`` is received."""
    loop = asyncio.get_running_loop()
    stop = asyncio.Event()
    received: list[signal.Signals] = []

    def _on_signal(signum: signal.Signals) -> None:
        logger.debug("Received %s", signum.name)
        received.append(signum)
        stop.set()

    for signum in signals:
        loop.add_signal_handler(signum, _on_signal, signum)

    job_task = asyncio.ensure_future(job)
    watcher = asyncio.ensure_future(stop.wait())
    try:
        _, pending = await asyncio.wait({job_task, watcher}, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
    finally:
        for signum in signals:
            loop.remove_signal_handler(signum)

    if job_task.cancelled():
        if received:
            raise Interrupted(f"received signal {received[0].name} before the profile was written")
        raise Interrupted("profile push was cancelled")
    return job_task.result()


def run(config: PushConfig) -> None:
    """Blocking entry point used by the CLI."""
    asyncio.run(supervise(push(config)))


__all__ = ["DEFAULT_SIGNALS", "push", "run", "supervise"]
