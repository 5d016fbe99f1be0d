"""Unit tests for OIDCProvider handlers."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import kopf
import pytest

from supervisor_operator.constants import PHASE_FAILED, PHASE_READY
from supervisor_operator.errors import TemporaryError, ValidationError
from supervisor_operator.generator.secret_usage import SecretUsage
from supervisor_operator.handlers.oidc_provider import (
    ensure_oidc_provider_secrets,
    forget_oidc_provider_keys,
    resync_oidc_provider_secrets,
    update_oidc_provider_secrets,
)
from supervisor_operator.secret_cache import DynamicSecretCache
from tests.fixtures.supervisor_resources import (
    ISSUER,
    KEY_WITH_32_BYTES,
    oidc_provider_body,
)

SECRETS = {"tokenSigningKey": {"name": "supervisor-token-signing-key-some-uid"}}


@pytest.fixture
def memo():
    reconciler = MagicMock()
    reconciler.reconcile = AsyncMock(return_value=SECRETS)
    return SimpleNamespace(secrets_reconciler=reconciler, secret_cache=DynamicSecretCache())


@pytest.fixture
def patch():
    return SimpleNamespace(status={})


class TestEnsureSecrets:
    @pytest.mark.asyncio
    async def test_writes_status_on_success(self, memo, patch):
        await ensure_oidc_provider_secrets(
            body=oidc_provider_body(),
            name="some-parent-name",
            namespace="some-namespace",
            patch=patch,
            memo=memo,
        )

        parent = memo.secrets_reconciler.reconcile.await_args.args[0]
        assert parent.metadata.uid == "some-uid"
        assert patch.status["secrets"] == SECRETS
        assert patch.status["status"] == PHASE_READY

    @pytest.mark.asyncio
    async def test_temporary_failure_is_retried(self, memo, patch):
        memo.secrets_reconciler.reconcile.side_effect = TemporaryError(
            "random source exhausted", delay=5
        )

        with pytest.raises(kopf.TemporaryError):
            await ensure_oidc_provider_secrets(
                body=oidc_provider_body(),
                name="some-parent-name",
                namespace="some-namespace",
                patch=patch,
                memo=memo,
            )

        assert patch.status["status"] == PHASE_FAILED
        assert "secrets" not in patch.status

    @pytest.mark.asyncio
    async def test_permanent_failure(self, memo, patch):
        memo.secrets_reconciler.reconcile.side_effect = ValidationError("unusable")

        with pytest.raises(kopf.PermanentError):
            await resync_oidc_provider_secrets(
                body=oidc_provider_body(), patch=patch, memo=memo
            )


    @pytest.mark.asyncio
    async def test_malformed_status_is_repaired(self, memo, patch):
        body = oidc_provider_body(status={"secrets": {"tokenSigningKey": {}}})

        await ensure_oidc_provider_secrets(
            body=body,
            name="some-parent-name",
            namespace="some-namespace",
            patch=patch,
            memo=memo,
        )

        memo.secrets_reconciler.reconcile.assert_awaited_once()
        assert patch.status["secrets"] == SECRETS
        assert patch.status["status"] == PHASE_READY

    @pytest.mark.asyncio
    async def test_unparsable_provider_fails_permanently(self, memo, patch):
        body = oidc_provider_body()
        body["spec"] = {"issuer": 42}

        with pytest.raises(kopf.PermanentError):
            await ensure_oidc_provider_secrets(
                body=body,
                name="some-parent-name",
                namespace="some-namespace",
                patch=patch,
                memo=memo,
            )

        memo.secrets_reconciler.reconcile.assert_not_called()
        assert patch.status["status"] == PHASE_FAILED
        assert "spec.issuer" in patch.status["message"]


class TestUpdate:
    @pytest.mark.asyncio
    async def test_issuer_change_forgets_old_keys(self, memo, patch):
        memo.secret_cache.set_key(ISSUER, SecretUsage.TOKEN_SIGNING_KEY, KEY_WITH_32_BYTES)
        new_body = oidc_provider_body(issuer="https://new.example.com")

        await update_oidc_provider_secrets(
            old=oidc_provider_body(),
            new=new_body,
            body=new_body,
            name="some-parent-name",
            namespace="some-namespace",
            patch=patch,
            memo=memo,
        )

        assert memo.secret_cache.get_key(ISSUER, SecretUsage.TOKEN_SIGNING_KEY) is None
        assert patch.status["secrets"] == SECRETS

    @pytest.mark.asyncio
    async def test_same_issuer_keeps_keys(self, memo, patch):
        memo.secret_cache.set_key(ISSUER, SecretUsage.TOKEN_SIGNING_KEY, KEY_WITH_32_BYTES)
        body = oidc_provider_body()

        await update_oidc_provider_secrets(
            old=body,
            new=body,
            body=body,
            name="some-parent-name",
            namespace="some-namespace",
            patch=patch,
            memo=memo,
        )

        assert memo.secret_cache.get_key(ISSUER, SecretUsage.TOKEN_SIGNING_KEY) == (
            KEY_WITH_32_BYTES
        )

    @pytest.mark.asyncio
    async def test_issuer_change_keeps_keys_shared_with_other_provider(
        self, memo, patch
    ):
        memo.secret_cache.claim_issuer("some-namespace/other-provider", ISSUER)
        memo.secret_cache.set_key(ISSUER, SecretUsage.TOKEN_SIGNING_KEY, KEY_WITH_32_BYTES)
        new_body = oidc_provider_body(issuer="https://new.example.com")

        await update_oidc_provider_secrets(
            old=oidc_provider_body(),
            new=new_body,
            body=new_body,
            name="some-parent-name",
            namespace="some-namespace",
            patch=patch,
            memo=memo,
        )

        assert memo.secret_cache.get_key(ISSUER, SecretUsage.TOKEN_SIGNING_KEY) == (
            KEY_WITH_32_BYTES
        )


class TestDelete:
    @pytest.mark.asyncio
    async def test_forgets_issuer(self, memo):
        memo.secret_cache.set_key(ISSUER, SecretUsage.STATE_SIGNING_KEY, KEY_WITH_32_BYTES)

        await forget_oidc_provider_keys(
            spec={"issuer": ISSUER},
            name="some-parent-name",
            namespace="some-namespace",
            memo=memo,
        )

        assert memo.secret_cache.issuers() == []

    @pytest.mark.asyncio
    async def test_keeps_issuer_served_by_other_provider(self, memo, patch):
        await ensure_oidc_provider_secrets(
            body=oidc_provider_body(name="other-provider", uid="other-uid"),
            name="other-provider",
            namespace="some-namespace",
            patch=patch,
            memo=memo,
        )
        memo.secret_cache.set_key(ISSUER, SecretUsage.STATE_SIGNING_KEY, KEY_WITH_32_BYTES)

        await forget_oidc_provider_keys(
            spec={"issuer": ISSUER},
            name="some-parent-name",
            namespace="some-namespace",
            memo=memo,
        )

        assert memo.secret_cache.issuers() == [ISSUER]

    @pytest.mark.asyncio
    async def test_missing_issuer_is_ignored(self, memo):
        memo.secret_cache.set_key(ISSUER, SecretUsage.STATE_SIGNING_KEY, KEY_WITH_32_BYTES)

        await forget_oidc_provider_keys(
            spec={}, name="some-parent-name", namespace="some-namespace", memo=memo
        )

        assert memo.secret_cache.issuers() == [ISSUER]
