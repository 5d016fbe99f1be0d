"""
Reconciler for the generated key secrets of OIDCProvider resources.

For every secret helper this runs the same rotation protocol:

1. Read the secret at the helper's deterministic name.
2. Keep it if the helper says it is valid; otherwise generate a replacement
   and persist it (create, or replace the invalid one; a secret of the wrong
   type is deleted and created again because the type cannot be updated).
3. Observe the active secret, which records it in the provider's status and
   publishes the key to in-process consumers.

Two reconciliations of the same provider address the same secret name, so a
create conflict means another worker won the race: the winner is read back
and revalidated instead of failing.
"""

import time
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from kubernetes import client
from kubernetes.client.rest import ApiException
from pydantic import ValidationError as PydanticValidationError

from ..constants import (
    API_GROUP,
    API_VERSION,
    OIDC_PROVIDER_PLURAL,
    PHASE_FAILED,
    PHASE_READY,
)
from ..errors import (
    KubernetesAPIError,
    OperatorError,
    RandomSourceError,
    TemporaryError,
    ValidationError,
)
from ..generator.random_source import RandomSource
from ..generator.secret_helper import SecretHelper, SymmetricSecretHelper
from ..generator.secret_usage import SecretUsage
from ..models import OIDCProvider
from ..observability.logging import OperatorLogger
from ..observability.metrics import metrics_collector
from ..secret_cache import DynamicSecretCache
from ..settings import Settings

RESOURCE_TYPE = "oidcprovider"


def build_secret_helpers(
    settings: Settings,
    random_source: RandomSource,
    cache: DynamicSecretCache,
) -> list[SymmetricSecretHelper]:
    """Create one helper per usage, publishing keys into ``cache``."""
    prefixes = {
        SecretUsage.TOKEN_SIGNING_KEY: settings.token_signing_key_secret_prefix,
        SecretUsage.STATE_SIGNING_KEY: settings.state_signing_key_secret_prefix,
        SecretUsage.STATE_ENCRYPTION_KEY: settings.state_encryption_key_secret_prefix,
    }
    return [
        SymmetricSecretHelper(
            name_prefix=prefix,
            labels=settings.generated_secret_labels,
            random_source=random_source,
            usage=usage,
            notify=cache.sink_for(usage),
        )
        for usage, prefix in prefixes.items()
    ]


def _api_error(message: str, e: ApiException) -> KubernetesAPIError:
    http_status = getattr(e, "status", None)
    return KubernetesAPIError(
        f"{message}: {e.reason}",
        reason=e.reason,
        retryable=http_status is None or http_status >= 500 or http_status == 409,
    )


class SupervisorSecretsReconciler:
    """Keeps the key secrets of OIDCProviders present, valid and published."""

    def __init__(
        self,
        helpers: Iterable[SecretHelper],
        k8s_client: client.ApiClient | None = None,
    ):
        """
        Initialize reconciler.

        Args:
            helpers: One secret helper per usage
            k8s_client: Kubernetes API client, will be created if not provided
        """
        self.helpers = list(helpers)
        self.k8s_client = k8s_client
        self.logger = OperatorLogger(self.__class__.__name__)
        self._core_api: client.CoreV1Api | None = None
        self._custom_api: client.CustomObjectsApi | None = None

    @property
    def core_api(self) -> client.CoreV1Api:
        if self._core_api is None:
            if self.k8s_client is None:
                from ..utils.kubernetes import get_kubernetes_client

                self.k8s_client = get_kubernetes_client()
            self._core_api = client.CoreV1Api(self.k8s_client)
        return self._core_api

    @property
    def custom_api(self) -> client.CustomObjectsApi:
        if self._custom_api is None:
            if self.k8s_client is None:
                from ..utils.kubernetes import get_kubernetes_client

                self.k8s_client = get_kubernetes_client()
            self._custom_api = client.CustomObjectsApi(self.k8s_client)
        return self._custom_api

    async def reconcile(self, parent: OIDCProvider) -> dict[str, Any]:
        """
        Ensure every usage of ``parent`` has an active, valid key secret.

        ``parent.status.secrets`` is updated in memory; persisting it is up to
        the caller.

        Returns:
            The ``status.secrets`` block in wire form

        Raises:
            OperatorError: If a secret could not be generated or persisted
        """
        name = parent.metadata.name
        namespace = parent.metadata.namespace
        start_time = time.time()

        self.logger.log_reconciliation_start(
            resource_type=RESOURCE_TYPE, resource_name=name, namespace=namespace
        )

        async with metrics_collector.track_reconciliation(
            resource_type=RESOURCE_TYPE, namespace=namespace
        ):
            try:
                for helper in self.helpers:
                    active = await self.ensure_secret(helper, parent)
                    helper.observe_active_secret_and_update_parent(parent, active)
                    metrics_collector.record_active_key_update(helper.usage.value)
            except OperatorError as e:
                self.logger.log_reconciliation_error(
                    resource_type=RESOURCE_TYPE,
                    resource_name=name,
                    namespace=namespace,
                    error=e,
                    duration=time.time() - start_time,
                )
                raise

        self.logger.log_reconciliation_success(
            resource_type=RESOURCE_TYPE,
            resource_name=name,
            namespace=namespace,
            duration=time.time() - start_time,
        )
        return parent.secrets_status_patch()

    async def ensure_secret(
        self, helper: SecretHelper, parent: OIDCProvider
    ) -> client.V1Secret:
        """Return a valid secret for ``helper``'s usage, generating one if needed."""
        namespace = parent.metadata.namespace
        secret_name = helper.secret_name_for(parent)
        usage = helper.usage.value

        existing = await self.get_secret(secret_name, namespace)
        if existing is not None:
            reason = self._validation_failure(helper, parent, existing)
            if reason is None:
                self.logger.debug(
                    f"Keeping existing secret {namespace}/{secret_name}",
                    usage=usage,
                    secret_name=secret_name,
                )
                return existing
            metrics_collector.record_validation_failure(usage, reason)
            self.logger.info(
                f"Secret {namespace}/{secret_name} is not usable ({reason}), regenerating",
                usage=usage,
                secret_name=secret_name,
                reason=reason,
            )

        candidate = self._generate(helper, parent)

        if existing is None:
            persisted = await self._create_or_adopt(helper, parent, candidate)
        else:
            persisted = await self._replace(helper, parent, candidate, existing)

        return persisted

    async def get_secret(self, name: str, namespace: str) -> client.V1Secret | None:
        """
        Retrieve a secret.

        Returns:
            Secret object if found, None if not found

        Raises:
            KubernetesAPIError: If read fails for reasons other than 404
        """
        try:
            return self.core_api.read_namespaced_secret(name=name, namespace=namespace)
        except ApiException as e:
            if e.status == 404:
                return None
            raise _api_error(f"Failed to read secret {namespace}/{name}", e) from e

    async def persist_status(self, parent: OIDCProvider) -> None:
        """Write the parent's ``status.secrets`` through the status subresource."""
        body = {
            "status": {
                "secrets": parent.secrets_status_patch(),
                **status_summary(PHASE_READY, "Key secrets are up to date"),
            }
        }
        try:
            self.custom_api.patch_namespaced_custom_object_status(
                group=API_GROUP,
                version=API_VERSION,
                namespace=parent.metadata.namespace,
                plural=OIDC_PROVIDER_PLURAL,
                name=parent.metadata.name,
                body=body,
            )
        except ApiException as e:
            raise _api_error(
                f"Failed to update status of OIDCProvider "
                f"{parent.metadata.namespace}/{parent.metadata.name}",
                e,
            ) from e

    async def get_parent(self, name: str, namespace: str) -> OIDCProvider | None:
        """Read an OIDCProvider, returning None if it no longer exists."""
        try:
            body = self.custom_api.get_namespaced_custom_object(
                group=API_GROUP,
                version=API_VERSION,
                namespace=namespace,
                plural=OIDC_PROVIDER_PLURAL,
                name=name,
            )
        except ApiException as e:
            if e.status == 404:
                return None
            raise _api_error(f"Failed to read OIDCProvider {namespace}/{name}", e) from e
        return parse_parent(body)

    def _validation_failure(
        self, helper: SecretHelper, parent: OIDCProvider, secret: client.V1Secret
    ) -> str | None:
        explain = getattr(helper, "validation_failure", None)
        if explain is not None:
            return explain(parent, secret)
        return None if helper.is_valid(parent, secret) else "invalid"

    def _generate(self, helper: SecretHelper, parent: OIDCProvider) -> client.V1Secret:
        try:
            return helper.generate(parent)
        except RandomSourceError as e:
            raise TemporaryError(
                f"Could not generate {helper.usage.value} for OIDCProvider "
                f"{parent.metadata.namespace}/{parent.metadata.name}: {e}",
                delay=e.delay,
            ) from e

    async def _create_or_adopt(
        self, helper: SecretHelper, parent: OIDCProvider, candidate: client.V1Secret
    ) -> client.V1Secret:
        namespace = candidate.metadata.namespace
        name = candidate.metadata.name
        try:
            created = self.core_api.create_namespaced_secret(
                namespace=namespace, body=candidate
            )
        except ApiException as e:
            if e.status != 409:
                raise _api_error(f"Failed to create secret {namespace}/{name}", e) from e

            # Lost the race; the winner may already be usable
            winner = await self.get_secret(name, namespace)
            if winner is None:
                raise TemporaryError(
                    f"Secret {namespace}/{name} conflicted on create but is gone",
                    delay=1,
                ) from e
            if helper.is_valid(parent, winner):
                self.logger.info(
                    f"Adopted concurrently created secret {namespace}/{name}",
                    usage=helper.usage.value,
                    secret_name=name,
                )
                return winner
            return await self._replace(helper, parent, candidate, winner)

        metrics_collector.record_secret_generated(helper.usage.value)
        self.logger.info(
            f"Created secret {namespace}/{name}",
            usage=helper.usage.value,
            secret_name=name,
        )
        return created

    async def _replace(
        self,
        helper: SecretHelper,
        parent: OIDCProvider,
        candidate: client.V1Secret,
        existing: client.V1Secret,
    ) -> client.V1Secret:
        namespace = candidate.metadata.namespace
        name = candidate.metadata.name
        if existing.type != candidate.type:
            # The type of a secret is immutable, so it has to be recreated
            await self._delete_for_recreate(helper, existing)
            return await self._create_or_adopt(helper, parent, candidate)

        # Optimistic concurrency: fail with 409 if someone else changed it
        candidate.metadata.resource_version = existing.metadata.resource_version
        try:
            replaced = self.core_api.replace_namespaced_secret(
                name=name, namespace=namespace, body=candidate
            )
        except ApiException as e:
            raise _api_error(f"Failed to replace secret {namespace}/{name}", e) from e

        usage = helper.usage.value
        metrics_collector.record_secret_generated(usage)
        self.logger.info(
            f"Replaced secret {namespace}/{name}", usage=usage, secret_name=name
        )
        return replaced

    async def _delete_for_recreate(
        self, helper: SecretHelper, existing: client.V1Secret
    ) -> None:
        namespace = existing.metadata.namespace
        name = existing.metadata.name
        # Only delete the exact object that failed validation
        preconditions = client.V1Preconditions(
            uid=existing.metadata.uid,
            resource_version=existing.metadata.resource_version,
        )
        try:
            self.core_api.delete_namespaced_secret(
                name=name,
                namespace=namespace,
                body=client.V1DeleteOptions(preconditions=preconditions),
            )
        except ApiException as e:
            if e.status == 404:
                return
            if e.status == 409:
                raise TemporaryError(
                    f"Secret {namespace}/{name} changed while being recreated",
                    delay=1,
                ) from e
            raise _api_error(f"Failed to delete secret {namespace}/{name}", e) from e

        self.logger.info(
            f"Deleted secret {namespace}/{name} of type {existing.type} for recreation",
            usage=helper.usage.value,
            secret_name=name,
        )


def parse_parent(body: Mapping[str, Any]) -> OIDCProvider:
    """
    Build an OIDCProvider from a kopf body or API response.

    Raises:
        ValidationError: If the resource cannot be interpreted
    """
    try:
        return OIDCProvider.model_validate(dict(body))
    except PydanticValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ValidationError(first.get("msg", str(e)), field=field) from e


def status_summary(phase: str, message: str) -> Mapping[str, str]:
    """Phase, message and timestamp fields written next to ``status.secrets``."""
    return {
        "status": phase,
        "message": message,
        "lastUpdateTime": datetime.now(UTC).isoformat(),
    }


def failed_status(error: Exception) -> Mapping[str, str]:
    return status_summary(PHASE_FAILED, str(error))
