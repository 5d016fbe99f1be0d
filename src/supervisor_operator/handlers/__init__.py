"""
Handlers package - Contains all Kopf event handlers.

This package organizes handlers by resource type:
- oidc_provider.py: OIDCProvider key secret lifecycle
- managed_secrets.py: reactions to changes of generated secrets
"""
