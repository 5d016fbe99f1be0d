"""
Managed secret handlers - react to tampering with or deletion of key secrets.

Generated secrets carry the configured label set and the symmetric type tag.
Any event on such a secret re-runs reconciliation for its owning
OIDCProvider, which regenerates the secret if it is no longer valid and
writes the provider's status directly.
"""

import logging
from typing import Any

import kopf

from ..constants import API_GROUP_VERSION, OIDC_PROVIDER_KIND, SYMMETRIC_SECRET_TYPE
from ..errors import OperatorError
from ..services.supervisor_secrets_reconciler import SupervisorSecretsReconciler
from ..settings import settings

logger = logging.getLogger(__name__)


def is_symmetric_secret(body: kopf.Body, **_: Any) -> bool:
    return body.get("type") == SYMMETRIC_SECRET_TYPE


def find_owning_provider(meta: dict[str, Any]) -> str | None:
    """Return the name of the OIDCProvider controlling a secret, if any."""
    for ref in meta.get("ownerReferences") or []:
        if (
            ref.get("controller")
            and ref.get("kind") == OIDC_PROVIDER_KIND
            and ref.get("apiVersion") == API_GROUP_VERSION
        ):
            return ref.get("name")
    return None


@kopf.on.event(
    "v1",
    "secrets",
    labels=settings.generated_secret_labels,
    when=is_symmetric_secret,
)
async def managed_secret_changed(
    event: dict[str, Any],
    meta: dict[str, Any],
    name: str,
    namespace: str,
    memo: kopf.Memo,
    **kwargs: Any,
) -> None:
    """
    Re-reconcile the OIDCProvider owning a changed or deleted key secret.

    Args:
        event: Raw watch event
        meta: Secret metadata
        name: Secret name
        namespace: Secret namespace
        memo: Operator memo holding the shared reconciler
    """
    provider_name = find_owning_provider(meta)
    if not provider_name:
        logger.debug(f"Secret {namespace}/{name} has no OIDCProvider controller")
        return

    reconciler: SupervisorSecretsReconciler = memo.secrets_reconciler
    try:
        parent = await reconciler.get_parent(provider_name, namespace)
        if parent is None:
            # Owner is gone; garbage collection removes the secret
            return

        logger.debug(
            f"Secret {namespace}/{name} saw {event.get('type')}, "
            f"reconciling OIDCProvider {namespace}/{provider_name}"
        )
        await reconciler.reconcile(parent)
        await reconciler.persist_status(parent)
    except OperatorError as e:
        # Event handlers are not retried; the periodic resync picks this up
        logger.warning(
            f"Could not reconcile OIDCProvider {namespace}/{provider_name} "
            f"after change to secret {name}: {e}"
        )
