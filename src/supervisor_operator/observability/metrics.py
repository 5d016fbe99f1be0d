"""
Prometheus metrics for the supervisor operator.

This module provides metrics collection for reconciliation and key
material lifecycle, plus a small HTTP server to expose them.
"""

import logging
import time
from contextlib import asynccontextmanager

# aiohttp comes with kopf; the metrics server reuses it
from aiohttp.web import Application, AppRunner, Request, Response, TCPSite
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

logger = logging.getLogger(__name__)

METRICS_REGISTRY = CollectorRegistry()

RECONCILIATION_TOTAL = Counter(
    "supervisor_operator_reconciliation_total",
    "Total number of reconciliation attempts",
    ["resource_type", "namespace", "result"],
    registry=METRICS_REGISTRY,
)

RECONCILIATION_DURATION = Histogram(
    "supervisor_operator_reconciliation_duration_seconds",
    "Time spent on reconciliation operations",
    ["resource_type", "namespace", "operation"],
    buckets=[0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
    registry=METRICS_REGISTRY,
)

RECONCILIATION_ERRORS = Counter(
    "supervisor_operator_reconciliation_errors_total",
    "Total number of reconciliation errors",
    ["resource_type", "namespace", "error_type", "retryable"],
    registry=METRICS_REGISTRY,
)

SECRETS_GENERATED = Counter(
    "supervisor_operator_secrets_generated_total",
    "Total number of key secrets generated and persisted",
    ["usage"],
    registry=METRICS_REGISTRY,
)

SECRET_VALIDATION_FAILURES = Counter(
    "supervisor_operator_secret_validation_failures_total",
    "Existing key secrets rejected, by reason",
    ["usage", "reason"],
    registry=METRICS_REGISTRY,
)

ACTIVE_KEY_UPDATES = Counter(
    "supervisor_operator_active_key_updates_total",
    "Number of times an active key was published to in-process consumers",
    ["usage"],
    registry=METRICS_REGISTRY,
)


class MetricsCollector:
    """Collects and manages metrics for the supervisor operator."""

    def __init__(self):
        self.registry = METRICS_REGISTRY

    @asynccontextmanager
    async def track_reconciliation(
        self,
        resource_type: str,
        namespace: str,
        operation: str = "reconcile",
    ):
        """
        Context manager to track reconciliation operations.

        Args:
            resource_type: Type of resource being reconciled
            namespace: Namespace of the resource
            operation: Type of operation being performed
        """
        start_time = time.time()
        result = "unknown"

        try:
            yield
            result = "success"
        except Exception as e:
            result = "error"
            retryable = "true" if getattr(e, "retryable", False) else "false"
            RECONCILIATION_ERRORS.labels(
                resource_type=resource_type,
                namespace=namespace,
                error_type=type(e).__name__,
                retryable=retryable,
            ).inc()
            raise
        finally:
            RECONCILIATION_TOTAL.labels(
                resource_type=resource_type, namespace=namespace, result=result
            ).inc()
            RECONCILIATION_DURATION.labels(
                resource_type=resource_type, namespace=namespace, operation=operation
            ).observe(time.time() - start_time)

    def record_secret_generated(self, usage: str) -> None:
        SECRETS_GENERATED.labels(usage=usage).inc()

    def record_validation_failure(self, usage: str, reason: str) -> None:
        SECRET_VALIDATION_FAILURES.labels(usage=usage, reason=reason).inc()

    def record_active_key_update(self, usage: str) -> None:
        ACTIVE_KEY_UPDATES.labels(usage=usage).inc()


class MetricsServer:
    """HTTP server for exposing Prometheus metrics."""

    def __init__(self, port: int = 8081, host: str = "0.0.0.0"):
        self.port = port
        self.host = host
        self.app = Application()
        self.runner: AppRunner | None = None
        self.site: TCPSite | None = None
        self.app.router.add_get("/metrics", self._metrics_handler)
        self.app.router.add_get("/healthz", self._healthz_handler)

    async def _metrics_handler(self, request: Request) -> Response:
        metrics_data = generate_latest(METRICS_REGISTRY)
        # aiohttp rejects charset inside content_type, so pass the header as-is
        return Response(body=metrics_data, headers={"Content-Type": CONTENT_TYPE_LATEST})

    async def _healthz_handler(self, request: Request) -> Response:
        return Response(text="ok")

    async def start(self) -> None:
        """Start the metrics HTTP server."""
        self.runner = AppRunner(self.app)
        await self.runner.setup()
        self.site = TCPSite(self.runner, self.host, self.port)
        await self.site.start()
        logger.info(f"Metrics server started on {self.host}:{self.port}")

    async def stop(self) -> None:
        """Stop the metrics HTTP server."""
        if self.runner:
            await self.runner.cleanup()
            self.runner = None
            self.site = None
            logger.info("Metrics server stopped")


# Global metrics collector instance
metrics_collector = MetricsCollector()
