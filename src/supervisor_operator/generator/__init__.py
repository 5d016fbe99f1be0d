"""
Generation and validation of the key material behind each OIDCProvider.

- random_source.py: where key bytes come from
- secret_usage.py: the usages a key can serve
- ownership.py: controller owner references
- secret_helper.py: generate / validate / observe for one usage
"""

from .random_source import BytesRandomSource, RandomSource, SecureRandomSource
from .secret_helper import SecretHelper, SymmetricSecretHelper
from .secret_usage import SecretUsage, SecretUsageDescriptor

__all__ = [
    "BytesRandomSource",
    "RandomSource",
    "SecureRandomSource",
    "SecretHelper",
    "SymmetricSecretHelper",
    "SecretUsage",
    "SecretUsageDescriptor",
]
