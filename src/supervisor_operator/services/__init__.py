"""
Services package - reconciliation logic behind the kopf handlers.
"""

from .supervisor_secrets_reconciler import (
    SupervisorSecretsReconciler,
    build_secret_helpers,
)

__all__ = ["SupervisorSecretsReconciler", "build_secret_helpers"]
