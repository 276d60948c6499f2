"""Client-side gRPC metrics.

Metric and label names match go-grpc-prometheus so dashboards built for the
Parca agent keep working.
"""

from __future__ import annotations

import asyncio
import time
from typing import Optional, Tuple

import grpc
from prometheus_client import CollectorRegistry, Counter, Histogram


class ClientMetrics:
    """Started/handled counters and a handling-time histogram for unary calls."""

    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()
        self.started = Counter(
            "grpc_client_started_total",
            "Total number of RPCs started on the client.",
            ["grpc_type", "grpc_service", "grpc_method"],
            registry=self.registry,
        )
        self.handled = Counter(
            "grpc_client_handled_total",
            "Total number of RPCs completed by the client, regardless of success or failure.",
            ["grpc_type", "grpc_service", "grpc_method", "grpc_code"],
            registry=self.registry,
        )
        self.handling_seconds = Histogram(
            "grpc_client_handling_seconds",
            "Histogram of response latency (seconds) of the gRPC until it is finished by the application.",
            ["grpc_type", "grpc_service", "grpc_method"],
            registry=self.registry,
        )


def split_method(full_method: str | bytes) -> Tuple[str, str]:
    """Split ``/package.Service/Method`` into its service and method names."""
    if isinstance(full_method, bytes):
        full_method = full_method.decode()
    service, _, method = full_method.lstrip("/").rpartition("/")
    return service or "unknown", method or "unknown"


class MetricsInterceptor(grpc.aio.UnaryUnaryClientInterceptor):
    def __init__(self, metrics: ClientMetrics) -> None:
        self._metrics = metrics

    async def intercept_unary_unary(self, continuation, client_call_details, request):
        service, method = split_method(client_call_details.method)
        self._metrics.started.labels("unary", service, method).inc()

        started = time.perf_counter()
        call = await continuation(client_call_details, request)
        try:
            code = await call.code()
        except asyncio.CancelledError:
            call.cancel()
            raise
        finally:
            self._metrics.handling_seconds.labels("unary", service, method).observe(
                time.perf_counter() - started
            )
        self._metrics.handled.labels("unary", service, method, code.name).inc()
        return call


__all__ = ["ClientMetrics", "MetricsInterceptor", "split_method"]
