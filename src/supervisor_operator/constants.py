"""
Constants used throughout the supervisor operator.

This module defines all constant values used by the operator including:
- API group, version and kind of the parent configuration object
- Managed secret type tag and data layout
- Resource labels
- Status phase constants
"""

# Parent configuration object
API_GROUP = "config.supervisor.dev"
API_VERSION = "v1alpha1"
API_GROUP_VERSION = f"{API_GROUP}/{API_VERSION}"
OIDC_PROVIDER_KIND = "OIDCProvider"
OIDC_PROVIDER_PLURAL = "oidcproviders"

# Managed secrets
SYMMETRIC_SECRET_TYPE = "secrets.supervisor.dev/symmetric"
SYMMETRIC_SECRET_DATA_KEY = "key"
SYMMETRIC_KEY_LENGTH = 32  # bytes, generated and required

# Label constants for resource identification and management
OPERATOR_LABEL_KEY = "supervisor.dev/managed-by"
OPERATOR_LABEL_VALUE = "supervisor-operator"

# Default secret name prefixes, one per usage
DEFAULT_TOKEN_SIGNING_KEY_PREFIX = "supervisor-token-signing-key-"
DEFAULT_STATE_SIGNING_KEY_PREFIX = "supervisor-state-signing-key-"
DEFAULT_STATE_ENCRYPTION_KEY_PREFIX = "supervisor-state-encryption-key-"

# Status phase constants
PHASE_READY = "Ready"
PHASE_FAILED = "Failed"

# Retry configuration
DEFAULT_RETRY_DELAY = 30
RANDOM_SOURCE_RETRY_DELAY = 5
