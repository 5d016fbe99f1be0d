"""
Supervisor Operator - key material lifecycle for a federated identity provider.

This operator keeps the symmetric keys behind each OIDCProvider in step with
the cluster:
- Generates token signing, state signing and state encryption keys
- Rotates keys whose backing secret is missing, malformed or foreign
- Publishes active keys to in-process signers without a watch round-trip
"""

__version__ = "0.1.0"
