"""
Models package - Pydantic models for type-safe resource handling.

Defines data models for:
- OIDCProvider configuration objects and their status
"""

from .oidc_provider import (
    LocalObjectReference,
    ObjectMeta,
    OIDCProvider,
    OIDCProviderSecrets,
    OIDCProviderSpec,
    OIDCProviderStatus,
)

__all__ = [
    "LocalObjectReference",
    "ObjectMeta",
    "OIDCProvider",
    "OIDCProviderSecrets",
    "OIDCProviderSpec",
    "OIDCProviderStatus",
]
