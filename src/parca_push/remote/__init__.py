"""gRPC connection to the remote profile store and the WriteRaw call."""

from .connection import BearerToken, build_channel, resolve_bearer_token
from .metrics import ClientMetrics, MetricsInterceptor
from .uploader import build_write_request, upload

__all__ = [
    "BearerToken",
    "ClientMetrics",
    "MetricsInterceptor",
    "build_channel",
    "build_write_request",
    "resolve_bearer_token",
    "upload",
]
