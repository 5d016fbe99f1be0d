"""Unit tests for the secret usage registry."""

import pytest

from supervisor_operator.constants import SYMMETRIC_KEY_LENGTH, SYMMETRIC_SECRET_TYPE
from supervisor_operator.generator.secret_usage import SecretUsage
from supervisor_operator.models import OIDCProviderSecrets


class TestSecretUsage:
    def test_three_usages(self):
        assert {u.value for u in SecretUsage} == {
            "token-signing-key",
            "state-signing-key",
            "state-encryption-key",
        }

    @pytest.mark.parametrize("usage", list(SecretUsage))
    def test_symmetric_descriptor(self, usage):
        descriptor = usage.descriptor
        assert descriptor.secret_type == SYMMETRIC_SECRET_TYPE
        assert descriptor.key_length == SYMMETRIC_KEY_LENGTH == 32
        assert descriptor.min_key_length == 32

    @pytest.mark.parametrize("usage", list(SecretUsage))
    def test_status_field_exists_on_model(self, usage):
        assert usage.descriptor.status_field in OIDCProviderSecrets.model_fields

    def test_status_fields_are_distinct(self):
        fields = [u.descriptor.status_field for u in SecretUsage]
        assert len(set(fields)) == len(fields)

    def test_descriptor_is_immutable(self):
        with pytest.raises(AttributeError):
            SecretUsage.TOKEN_SIGNING_KEY.descriptor.key_length = 1
