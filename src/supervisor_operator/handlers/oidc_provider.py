"""
OIDCProvider handlers - keep each provider's key secrets generated and published.

Creation, resumption, spec updates and a periodic timer all run the same
reconciliation. Deletion only releases the provider's issuer in the in-process
cache: the secrets themselves are removed by owner-reference garbage
collection, so no finalizer is needed.
"""

import logging
from typing import Any

import kopf

from ..constants import API_GROUP, API_VERSION, OIDC_PROVIDER_PLURAL, PHASE_READY
from ..errors import OperatorError
from ..services.supervisor_secrets_reconciler import (
    SupervisorSecretsReconciler,
    failed_status,
    parse_parent,
    status_summary,
)
from ..settings import settings

logger = logging.getLogger(__name__)


def provider_key(namespace: str, name: str) -> str:
    """Identity under which a provider claims its issuer in the key cache."""
    return f"{namespace}/{name}"


async def _reconcile_into_patch(
    body: kopf.Body, patch: kopf.Patch, memo: kopf.Memo
) -> None:
    reconciler: SupervisorSecretsReconciler = memo.secrets_reconciler
    try:
        parent = parse_parent(body)
        memo.secret_cache.claim_issuer(
            provider_key(parent.metadata.namespace, parent.metadata.name),
            parent.spec.issuer,
        )
        secrets = await reconciler.reconcile(parent)
    except OperatorError as e:
        patch.status.update(failed_status(e))
        raise e.as_kopf_error() from e

    patch.status["secrets"] = secrets
    patch.status.update(status_summary(PHASE_READY, "Key secrets are up to date"))


@kopf.on.create(OIDC_PROVIDER_PLURAL, group=API_GROUP, version=API_VERSION)
@kopf.on.resume(OIDC_PROVIDER_PLURAL, group=API_GROUP, version=API_VERSION)
async def ensure_oidc_provider_secrets(
    body: kopf.Body,
    name: str,
    namespace: str,
    patch: kopf.Patch,
    memo: kopf.Memo,
    **kwargs: Any,
) -> None:
    """
    Ensure an OIDCProvider has valid key secrets and publish its keys.

    Args:
        body: Complete OIDCProvider resource
        name: Name of the OIDCProvider
        namespace: Namespace of the OIDCProvider
        patch: Kopf patch object used to write the status
        memo: Operator memo holding the shared reconciler
    """
    logger.info(f"Ensuring key secrets for OIDCProvider {namespace}/{name}")
    await _reconcile_into_patch(body, patch, memo)
    # Return None to avoid Kopf creating status subpaths
    return None


@kopf.on.update(OIDC_PROVIDER_PLURAL, group=API_GROUP, version=API_VERSION)
async def update_oidc_provider_secrets(
    old: dict[str, Any],
    new: dict[str, Any],
    body: kopf.Body,
    name: str,
    namespace: str,
    patch: kopf.Patch,
    memo: kopf.Memo,
    **kwargs: Any,
) -> None:
    """
    Re-publish keys after a spec change.

    When the issuer changes, this provider releases the previous issuer; its
    cached keys are dropped unless another provider still serves it.
    """
    old_issuer = (old or {}).get("spec", {}).get("issuer", "")
    new_issuer = (new or {}).get("spec", {}).get("issuer", "")
    if old_issuer and old_issuer != new_issuer:
        logger.info(
            f"Issuer of OIDCProvider {namespace}/{name} changed, "
            f"releasing {old_issuer}"
        )
        memo.secret_cache.release_issuer(provider_key(namespace, name), old_issuer)

    await _reconcile_into_patch(body, patch, memo)
    return None


@kopf.timer(
    OIDC_PROVIDER_PLURAL,
    group=API_GROUP,
    version=API_VERSION,
    interval=settings.resync_interval_seconds,
    initial_delay=settings.resync_interval_seconds,
)
async def resync_oidc_provider_secrets(
    body: kopf.Body,
    patch: kopf.Patch,
    memo: kopf.Memo,
    **kwargs: Any,
) -> None:
    """Periodically re-validate key secrets, regenerating any that were tampered with."""
    await _reconcile_into_patch(body, patch, memo)


@kopf.on.delete(
    OIDC_PROVIDER_PLURAL, group=API_GROUP, version=API_VERSION, optional=True
)
async def forget_oidc_provider_keys(
    spec: dict[str, Any],
    name: str,
    namespace: str,
    memo: kopf.Memo,
    **kwargs: Any,
) -> None:
    """Release the deleted provider's issuer in the in-process cache."""
    issuer = (spec or {}).get("issuer", "")
    released = issuer and memo.secret_cache.release_issuer(
        provider_key(namespace, name), issuer
    )
    if released:
        logger.info(f"Dropped cached keys of deleted OIDCProvider {namespace}/{name}")
