"""
Pydantic models for OIDCProvider resources.

An OIDCProvider describes one identity provider instance served by the
supervisor. The operator only reads its identity and issuer, and writes the
names of the active key secrets into ``status.secrets``.
"""

from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..constants import API_GROUP_VERSION, OIDC_PROVIDER_KIND


class LocalObjectReference(BaseModel):
    """Reference to an object in the same namespace."""

    name: str = Field(..., description="Name of the referenced object")


class ObjectMeta(BaseModel):
    """The subset of Kubernetes object metadata the operator relies on."""

    model_config = {"populate_by_name": True, "extra": "ignore"}

    name: str = Field("", description="Name of the resource")
    namespace: str = Field("", description="Namespace of the resource")
    uid: str = Field("", description="Platform-assigned unique identifier")
    resource_version: str | None = Field(None, alias="resourceVersion")


class OIDCProviderSpec(BaseModel):
    """Specification for an OIDCProvider resource."""

    model_config = {"populate_by_name": True, "extra": "ignore"}

    issuer: str = Field("", description="Issuer URL of this identity provider")


class OIDCProviderSecrets(BaseModel):
    """Names of the secrets holding the active key material, per usage."""

    model_config = {"populate_by_name": True}

    token_signing_key: LocalObjectReference | None = Field(
        None,
        alias="tokenSigningKey",
        description="Secret holding the key used to sign issued tokens",
    )
    state_signing_key: LocalObjectReference | None = Field(
        None,
        alias="stateSigningKey",
        description="Secret holding the key used to sign login state",
    )
    state_encryption_key: LocalObjectReference | None = Field(
        None,
        alias="stateEncryptionKey",
        description="Secret holding the key used to encrypt login state",
    )

    @field_validator(
        "token_signing_key", "state_signing_key", "state_encryption_key", mode="wrap"
    )
    @classmethod
    def drop_malformed_reference(cls, value: Any, handler: Any) -> Any:
        # Written only by this operator; a broken entry is rewritten on reconcile
        try:
            return handler(value)
        except ValidationError:
            return None


class OIDCProviderStatus(BaseModel):
    """Status of an OIDCProvider resource."""

    model_config = {"populate_by_name": True, "extra": "ignore"}

    status: str | None = Field(None, description="Current phase")
    message: str | None = Field(None, description="Human readable status message")
    last_update_time: str | None = Field(None, alias="lastUpdateTime")
    secrets: OIDCProviderSecrets = Field(default_factory=OIDCProviderSecrets)


class OIDCProvider(BaseModel):
    """
    Complete OIDCProvider resource.

    Built from the kopf body or from a CustomObjectsApi response with
    ``OIDCProvider.model_validate(body)``.
    """

    model_config = {"populate_by_name": True, "extra": "ignore"}

    api_version: str = Field(API_GROUP_VERSION, alias="apiVersion")
    kind: str = Field(OIDC_PROVIDER_KIND)
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: OIDCProviderSpec = Field(default_factory=OIDCProviderSpec)
    status: OIDCProviderStatus = Field(default_factory=OIDCProviderStatus)

    @field_validator("status", mode="wrap")
    @classmethod
    def reset_malformed_status(cls, value: Any, handler: Any) -> Any:
        try:
            return handler(value)
        except ValidationError:
            return OIDCProviderStatus()

    def secrets_status_patch(self) -> dict[str, Any]:
        """Render ``status.secrets`` in the wire form used for status patches."""
        return self.status.secrets.model_dump(by_alias=True, exclude_none=True)
