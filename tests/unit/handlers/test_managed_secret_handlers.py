"""Unit tests for the managed secret event handler."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from supervisor_operator.constants import API_GROUP_VERSION, SYMMETRIC_SECRET_TYPE
from supervisor_operator.errors import KubernetesAPIError, ValidationError
from supervisor_operator.handlers.managed_secrets import (
    find_owning_provider,
    is_symmetric_secret,
    managed_secret_changed,
)
from supervisor_operator.models import OIDCProvider
from tests.fixtures.supervisor_resources import oidc_provider_body


def _meta(kind="OIDCProvider", api_version=API_GROUP_VERSION, controller=True):
    return {
        "name": "supervisor-token-signing-key-some-uid",
        "namespace": "some-namespace",
        "ownerReferences": [
            {
                "apiVersion": api_version,
                "kind": kind,
                "name": "some-parent-name",
                "uid": "some-uid",
                "controller": controller,
            }
        ],
    }


@pytest.fixture
def memo():
    reconciler = MagicMock()
    reconciler.get_parent = AsyncMock(
        return_value=OIDCProvider.model_validate(oidc_provider_body())
    )
    reconciler.reconcile = AsyncMock(return_value={})
    reconciler.persist_status = AsyncMock()
    return SimpleNamespace(secrets_reconciler=reconciler)


async def _fire(memo, meta, event_type="DELETED"):
    await managed_secret_changed(
        event={"type": event_type},
        meta=meta,
        name=meta["name"],
        namespace=meta["namespace"],
        memo=memo,
    )


class TestFilters:
    def test_is_symmetric_secret(self):
        assert is_symmetric_secret({"type": SYMMETRIC_SECRET_TYPE})
        assert not is_symmetric_secret({"type": "Opaque"})

    def test_find_owning_provider(self):
        assert find_owning_provider(_meta()) == "some-parent-name"

    @pytest.mark.parametrize(
        "meta",
        [
            _meta(kind="Deployment"),
            _meta(api_version="config.supervisor.dev/v1"),
            _meta(controller=False),
            {"name": "x"},
        ],
    )
    def test_find_owning_provider_ignores_others(self, meta):
        assert find_owning_provider(meta) is None


class TestManagedSecretChanged:
    @pytest.mark.asyncio
    async def test_reconciles_owner(self, memo):
        await _fire(memo, _meta())

        reconciler = memo.secrets_reconciler
        reconciler.get_parent.assert_awaited_once_with("some-parent-name", "some-namespace")
        reconciler.reconcile.assert_awaited_once()
        reconciler.persist_status.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unowned_secret_is_ignored(self, memo):
        await _fire(memo, _meta(kind="Deployment"))
        memo.secrets_reconciler.get_parent.assert_not_called()

    @pytest.mark.asyncio
    async def test_owner_gone(self, memo):
        memo.secrets_reconciler.get_parent.return_value = None

        await _fire(memo, _meta())

        memo.secrets_reconciler.reconcile.assert_not_called()

    @pytest.mark.asyncio
    async def test_errors_are_logged_not_raised(self, memo, caplog):
        memo.secrets_reconciler.reconcile.side_effect = KubernetesAPIError(
            "boom", reason="InternalError"
        )

        await _fire(memo, _meta(), event_type="MODIFIED")

        memo.secrets_reconciler.persist_status.assert_not_called()
        assert any("Could not reconcile" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_unparsable_owner_is_logged(self, memo, caplog):
        memo.secrets_reconciler.get_parent.side_effect = ValidationError(
            "Input should be a valid string", field="spec.issuer"
        )

        await _fire(memo, _meta())

        memo.secrets_reconciler.reconcile.assert_not_called()
        assert any("spec.issuer" in r.getMessage() for r in caplog.records)
