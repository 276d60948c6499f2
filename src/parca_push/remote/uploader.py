"""Send a raw profile with a single WriteRaw call."""

from __future__ import annotations

import logging
from typing import Any, Mapping

import grpc

from ..core.errors import UploadError
from ..proto import get_profilestore_bundle

logger = logging.getLogger(__name__)


def build_write_request(labels: Mapping[str, str], raw_profile: bytes, normalized: bool) -> Any:
    """Build a request carrying one series with one sample."""
    bundle = get_profilestore_bundle()
    label_set = bundle.LabelSetCls(
        labels=[bundle.LabelCls(name=name, value=value) for name, value in labels.items()]
    )
    series = bundle.RawProfileSeriesCls(
        labels=label_set,
        samples=[bundle.RawSampleCls(raw_profile=raw_profile)],
    )
    return bundle.WriteRawRequestCls(series=[series], normalized=normalized)


async def upload(channel: grpc.aio.Channel, request: Any) -> None:
    stub = get_profilestore_bundle().stub_factory(channel)
    try:
        await stub.WriteRaw(request)
    except grpc.aio.AioRpcError as exc:
        raise UploadError(f"write profile: {exc.code().name}: {exc.details()}") from exc
    logger.info("Wrote %d profile bytes", len(request.series[0].samples[0].raw_profile))


__all__ = ["build_write_request", "upload"]
