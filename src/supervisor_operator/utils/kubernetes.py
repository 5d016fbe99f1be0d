"""
Kubernetes utilities for the supervisor operator.

This module loads cluster configuration and builds API clients for both
in-cluster and local development use.
"""

import logging

from kubernetes import client, config

logger = logging.getLogger(__name__)


def load_kubernetes_config() -> None:
    """
    Load in-cluster configuration, falling back to the local kubeconfig.

    Raises:
        config.ConfigException: If neither configuration can be loaded
    """
    try:
        config.load_incluster_config()
        logger.debug("Loaded in-cluster Kubernetes configuration")
    except config.ConfigException:
        try:
            config.load_kube_config()
            logger.debug("Loaded kubeconfig from local environment")
        except config.ConfigException as e:
            logger.error(f"Failed to load Kubernetes configuration: {e}")
            raise


def get_kubernetes_client() -> client.ApiClient:
    """
    Get configured Kubernetes API client.

    Returns:
        Configured Kubernetes API client
    """
    load_kubernetes_config()
    return client.ApiClient()
