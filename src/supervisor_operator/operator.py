#!/usr/bin/env python3
"""
Supervisor Operator - Main entry point for the Kopf-based supervisor operator.

Usage:
    python -m supervisor_operator.operator
    # Or with kopf directly:
    kopf run -m supervisor_operator.operator --all-namespaces

Environment Variables:
    SUPERVISOR_OPERATOR_NAMESPACES: Comma-separated list of namespaces to watch
    LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
    GENERATED_SECRET_LABELS: JSON object of labels for generated secrets
"""

import logging
import sys

import kopf

# Importing handler modules registers their decorators with kopf
from supervisor_operator.handlers import managed_secrets, oidc_provider  # noqa: F401
from supervisor_operator.generator.random_source import SecureRandomSource
from supervisor_operator.observability.logging import setup_structured_logging
from supervisor_operator.observability.metrics import MetricsServer
from supervisor_operator.secret_cache import DynamicSecretCache
from supervisor_operator.services import (
    SupervisorSecretsReconciler,
    build_secret_helpers,
)
from supervisor_operator.settings import settings as operator_settings
from supervisor_operator.utils.kubernetes import get_kubernetes_client


def configure_logging() -> None:
    """Configure structured logging for the operator based on operator_settings."""
    setup_structured_logging(
        log_level=operator_settings.log_level.upper(),
        enable_json_formatting=operator_settings.json_logs,
        correlation_id_enabled=operator_settings.correlation_ids,
    )


def build_memo(memo: kopf.Memo, k8s_client=None) -> None:
    """
    Populate the operator memo with the objects shared by all handlers.

    One secure random source and one key cache serve every reconciliation;
    both are safe for concurrent use.
    """
    memo.random_source = SecureRandomSource()
    memo.secret_cache = DynamicSecretCache()
    memo.secrets_reconciler = SupervisorSecretsReconciler(
        helpers=build_secret_helpers(
            operator_settings, memo.random_source, memo.secret_cache
        ),
        k8s_client=k8s_client,
    )


@kopf.on.startup()
async def startup_handler(
    settings: kopf.OperatorSettings, memo: kopf.Memo, **_
) -> None:
    """
    Operator startup configuration.

    Loads cluster configuration, builds the shared reconciler and key cache,
    and starts the metrics endpoint.
    """
    logging.info("Starting supervisor operator...")
    settings.watching.reconnect_backoff = 1.0
    settings.execution.max_workers = 20

    watched_namespaces = operator_settings.watched_namespaces
    if watched_namespaces:
        logging.info(f"Watching namespaces: {', '.join(watched_namespaces)}")
    else:
        logging.info("Watching all namespaces (cluster-wide mode)")

    build_memo(memo, k8s_client=get_kubernetes_client())

    try:
        metrics_server = MetricsServer(
            port=operator_settings.metrics_port, host=operator_settings.metrics_host
        )
        await metrics_server.start()
        memo.metrics_server = metrics_server
    except OSError as e:
        # Don't fail operator startup if metrics server fails
        logging.warning(f"Failed to start metrics server, continuing without it: {e}")


@kopf.on.cleanup()
async def cleanup_handler(memo: kopf.Memo, **_) -> None:
    """Stop the metrics server on shutdown."""
    logging.info("Shutting down supervisor operator...")
    metrics_server = getattr(memo, "metrics_server", None)
    if metrics_server is not None:
        await metrics_server.stop()


@kopf.on.probe(id="issuers")
async def issuers_probe(memo: kopf.Memo, **_) -> int:
    """Number of issuers with published keys, reported on the liveness endpoint."""
    cache = getattr(memo, "secret_cache", None)
    return len(cache.issuers()) if cache is not None else 0


def main() -> None:
    """
    Main entry point for the operator.

    Configures logging, determines namespace scope and runs kopf.
    """
    configure_logging()

    watched_namespaces = operator_settings.watched_namespaces
    try:
        if watched_namespaces:
            kopf.run(
                namespaces=watched_namespaces,
                liveness_endpoint="http://0.0.0.0:8080/healthz",
            )
        else:
            kopf.run(
                clusterwide=True,
                liveness_endpoint="http://0.0.0.0:8080/healthz",
            )
    except KeyboardInterrupt:
        logging.info("Received shutdown signal")
        sys.exit(0)


if __name__ == "__main__":
    main()
