"""
In-process cache of the active key material, per issuer and usage.

The reconciler publishes keys here through the sinks returned by
``sink_for``; token signers and state encoders read them on the request
path. Every update replaces a single value under a lock, so readers see
either the old key or the new one, never a mix.

Several OIDCProviders may share an issuer. Each provider claims the issuer it
serves, and an issuer's keys are only dropped once no provider claims it.
"""

import threading
from collections.abc import Callable

from .generator.secret_usage import SecretUsage


class DynamicSecretCache:
    """Thread-safe mapping of issuer -> usage -> raw key bytes."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._keys: dict[str, dict[SecretUsage, bytes]] = {}
        self._claims: dict[str, set[str]] = {}

    def set_key(self, issuer: str, usage: SecretUsage, key: bytes) -> None:
        key = bytes(key)
        with self._lock:
            self._keys.setdefault(issuer, {})[usage] = key

    def get_key(self, issuer: str, usage: SecretUsage) -> bytes | None:
        with self._lock:
            return self._keys.get(issuer, {}).get(usage)

    def sink_for(self, usage: SecretUsage) -> Callable[[str, bytes], None]:
        """Return the notification sink that stores keys of ``usage``."""

        def notify(issuer: str, key: bytes) -> None:
            self.set_key(issuer, usage, key)

        return notify

    def claim_issuer(self, provider: str, issuer: str) -> None:
        """Record that ``provider`` (namespace/name) serves ``issuer``."""
        with self._lock:
            self._claims.setdefault(issuer, set()).add(provider)

    def release_issuer(self, provider: str, issuer: str) -> bool:
        """
        Withdraw ``provider``'s claim on ``issuer``.

        The issuer's keys are dropped once no other provider claims it.

        Returns:
            True if keys were dropped
        """
        with self._lock:
            claims = self._claims.get(issuer, set())
            claims.discard(provider)
            if claims:
                return False
            self._claims.pop(issuer, None)
            return self._keys.pop(issuer, None) is not None

    def issuers(self) -> list[str]:
        with self._lock:
            return sorted(self._keys)
