"""
Secret helpers: generate, validate and observe the key secrets of an OIDCProvider.

A helper is bound to one usage. The driver uses it in three steps that are
the same for every usage:

1. ``is_valid`` decides whether the existing secret can be kept.
2. ``generate`` builds a replacement when it cannot; the driver persists it.
3. ``observe_active_secret_and_update_parent`` records the active secret in
   the parent's status and hands the raw key to the notification sink.

None of these perform I/O, log, or hold mutable state.
"""

import base64
import binascii
from collections.abc import Callable, Mapping
from typing import Protocol

from kubernetes import client

from ..constants import SYMMETRIC_SECRET_DATA_KEY
from ..models import LocalObjectReference, OIDCProvider
from .ownership import is_controlled_by, new_controller_ref
from .random_source import RandomSource, read_exactly
from .secret_usage import SecretUsage

# Called with (issuer, raw key bytes) whenever the active key changes.
NotifyFunc = Callable[[str, bytes], None]

# Reasons reported by validation_failure()
REASON_WRONG_TYPE = "wrong_type"
REASON_MISSING_KEY = "missing_key"
REASON_UNDECODABLE_KEY = "undecodable_key"
REASON_KEY_TOO_SHORT = "key_too_short"
REASON_NOT_OWNED = "not_owned"


class SecretHelper(Protocol):
    """Contract shared by every kind of generated key secret."""

    usage: SecretUsage

    def secret_name_for(self, parent: OIDCProvider) -> str: ...

    def generate(self, parent: OIDCProvider) -> client.V1Secret: ...

    def is_valid(self, parent: OIDCProvider, secret: client.V1Secret) -> bool: ...

    def observe_active_secret_and_update_parent(
        self, parent: OIDCProvider, secret: client.V1Secret
    ) -> None: ...


def decode_key(value: str | bytes | None) -> bytes | None:
    """Decode a base64 secret data value, returning None when it is malformed."""
    if value is None:
        return None
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError, TypeError):
        return None


def encode_key(key: bytes) -> str:
    """Encode raw key bytes the way the Kubernetes API stores secret data."""
    return base64.b64encode(key).decode("ascii")


class SymmetricSecretHelper:
    """Manages the symmetric key secret of one usage for OIDCProviders."""

    def __init__(
        self,
        name_prefix: str,
        labels: Mapping[str, str] | None,
        random_source: RandomSource | None,
        usage: SecretUsage,
        notify: NotifyFunc | None,
    ):
        """
        Initialize the helper.

        Args:
            name_prefix: Prefix of generated secret names; the parent uid follows it
            labels: Labels copied onto every generated secret
            random_source: Source of key bytes
            usage: Which key this helper manages
            notify: Sink receiving (issuer, key) whenever the active key is observed
        """
        self.name_prefix = name_prefix
        self.labels = dict(labels or {})
        self.random_source = random_source
        self.usage = usage
        self.notify = notify

    def secret_name_for(self, parent: OIDCProvider) -> str:
        return f"{self.name_prefix}{parent.metadata.uid}"

    def generate(self, parent: OIDCProvider) -> client.V1Secret:
        """
        Build a new secret for ``parent``. Nothing is persisted.

        Raises:
            RandomSourceError: If the random source cannot supply the key
        """
        descriptor = self.usage.descriptor
        key = read_exactly(self.random_source, descriptor.key_length)

        return client.V1Secret(
            api_version="v1",
            kind="Secret",
            metadata=client.V1ObjectMeta(
                name=self.secret_name_for(parent),
                namespace=parent.metadata.namespace,
                labels=dict(self.labels),
                owner_references=[new_controller_ref(parent)],
            ),
            type=descriptor.secret_type,
            data={SYMMETRIC_SECRET_DATA_KEY: encode_key(key)},
        )

    def validation_failure(
        self, parent: OIDCProvider, secret: client.V1Secret
    ) -> str | None:
        """Return why ``secret`` cannot be the active secret, or None if it can."""
        descriptor = self.usage.descriptor

        if getattr(secret, "type", None) != descriptor.secret_type:
            return REASON_WRONG_TYPE

        data = getattr(secret, "data", None) or {}
        if SYMMETRIC_SECRET_DATA_KEY not in data:
            return REASON_MISSING_KEY

        key = decode_key(data[SYMMETRIC_SECRET_DATA_KEY])
        if key is None:
            return REASON_UNDECODABLE_KEY
        if len(key) < descriptor.min_key_length:
            return REASON_KEY_TOO_SHORT

        if not is_controlled_by(secret, parent):
            return REASON_NOT_OWNED

        return None

    def is_valid(self, parent: OIDCProvider, secret: client.V1Secret) -> bool:
        return self.validation_failure(parent, secret) is None

    def observe_active_secret_and_update_parent(
        self, parent: OIDCProvider, secret: client.V1Secret
    ) -> None:
        """
        Record ``secret`` as the active secret and publish its key.

        ``secret`` must already have passed ``is_valid`` or come from
        ``generate``; it is not checked again.
        """
        setattr(
            parent.status.secrets,
            self.usage.descriptor.status_field,
            LocalObjectReference(name=secret.metadata.name),
        )

        if self.notify is not None:
            key = base64.b64decode(secret.data[SYMMETRIC_SECRET_DATA_KEY])
            self.notify(parent.spec.issuer, key)
