"""
Registry of the purposes generated key material can serve.

Each usage is plain configuration data: the type tag its secrets carry, how
many bytes to generate, the minimum acceptable length and the field of
``OIDCProvider.status.secrets`` that records the active secret.
"""

from dataclasses import dataclass
from enum import Enum

from ..constants import SYMMETRIC_KEY_LENGTH, SYMMETRIC_SECRET_TYPE


@dataclass(frozen=True)
class SecretUsageDescriptor:
    """Static description of one usage."""

    secret_type: str
    key_length: int
    min_key_length: int
    status_field: str


class SecretUsage(Enum):
    """Purposes a symmetric key can serve."""

    TOKEN_SIGNING_KEY = "token-signing-key"
    STATE_SIGNING_KEY = "state-signing-key"
    STATE_ENCRYPTION_KEY = "state-encryption-key"

    @property
    def descriptor(self) -> SecretUsageDescriptor:
        return _DESCRIPTORS[self]


_DESCRIPTORS: dict[SecretUsage, SecretUsageDescriptor] = {
    SecretUsage.TOKEN_SIGNING_KEY: SecretUsageDescriptor(
        secret_type=SYMMETRIC_SECRET_TYPE,
        key_length=SYMMETRIC_KEY_LENGTH,
        min_key_length=SYMMETRIC_KEY_LENGTH,
        status_field="token_signing_key",
    ),
    SecretUsage.STATE_SIGNING_KEY: SecretUsageDescriptor(
        secret_type=SYMMETRIC_SECRET_TYPE,
        key_length=SYMMETRIC_KEY_LENGTH,
        min_key_length=SYMMETRIC_KEY_LENGTH,
        status_field="state_signing_key",
    ),
    SecretUsage.STATE_ENCRYPTION_KEY: SecretUsageDescriptor(
        secret_type=SYMMETRIC_SECRET_TYPE,
        key_length=SYMMETRIC_KEY_LENGTH,
        min_key_length=SYMMETRIC_KEY_LENGTH,
        status_field="state_encryption_key",
    ),
}
