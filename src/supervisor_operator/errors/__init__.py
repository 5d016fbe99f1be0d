"""
Error handling module for the supervisor operator.

This module provides an error hierarchy that integrates with kopf
and provides clear categorization for different types of failures.
"""

from .operator_errors import (
    ExternalServiceError,
    KubernetesAPIError,
    OperatorError,
    RandomSourceError,
    TemporaryError,
    ValidationError,
)

__all__ = [
    "OperatorError",
    "ValidationError",
    "TemporaryError",
    "ExternalServiceError",
    "KubernetesAPIError",
    "RandomSourceError",
]
