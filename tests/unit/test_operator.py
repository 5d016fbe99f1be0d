"""Unit tests for operator wiring."""

from unittest.mock import MagicMock

import kopf
import pytest

from supervisor_operator.generator.random_source import SecureRandomSource
from supervisor_operator.generator.secret_usage import SecretUsage
from supervisor_operator.operator import build_memo, cleanup_handler, issuers_probe
from supervisor_operator.secret_cache import DynamicSecretCache
from supervisor_operator.services import SupervisorSecretsReconciler


def test_build_memo():
    memo = kopf.Memo()
    k8s_client = MagicMock()

    build_memo(memo, k8s_client=k8s_client)

    assert isinstance(memo.random_source, SecureRandomSource)
    assert isinstance(memo.secret_cache, DynamicSecretCache)
    reconciler = memo.secrets_reconciler
    assert isinstance(reconciler, SupervisorSecretsReconciler)
    assert reconciler.k8s_client is k8s_client
    assert [h.usage for h in reconciler.helpers] == list(SecretUsage)
    assert all(h.random_source is memo.random_source for h in reconciler.helpers)


@pytest.mark.asyncio
async def test_issuers_probe():
    memo = kopf.Memo()
    assert await issuers_probe(memo=memo) == 0

    build_memo(memo, k8s_client=MagicMock())
    memo.secret_cache.set_key("https://a", SecretUsage.TOKEN_SIGNING_KEY, b"k")
    assert await issuers_probe(memo=memo) == 1


@pytest.mark.asyncio
async def test_cleanup_without_metrics_server():
    await cleanup_handler(memo=kopf.Memo())
