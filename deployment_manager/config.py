"""
Configuration settings for the deployment manager.
"""
import logging
import os
from typing import List, Optional

from kubernetes import client
from kubernetes import config as k8s_config
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ClientConfigError

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=True)

    # Application
    APP_NAME: str = Field(default="deployment-manager", description="Application name")
    HTTP_HOST: str = Field(default="0.0.0.0", description="Bind address")
    HTTP_PORT: int = Field(default=8080, description="Service port")
    LOG_LEVEL: str = Field(default="info", description="Log level: debug|info|warning")
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")

    # Kubernetes
    KUBECONFIG: str = Field(
        default=os.path.join(os.path.expanduser("~"), ".kube", "config"),
        description="Kubeconfig path used outside the cluster",
    )
    K8S_CONTEXT: Optional[str] = Field(default=None, description="Kubeconfig context")
    REQUEST_TIMEOUT_SECS: float = Field(default=30, gt=0, description="Per-call API timeout")

    # Deployment template
    DEFAULT_REPLICAS: int = Field(default=2, ge=0)
    CONTAINER_NAME: str = Field(default="web")
    CONTAINER_PORT_NAME: str = Field(default="http")
    CONTAINER_PORT: int = Field(default=80, gt=0)
    IGNORE_EXISTING_NAMESPACE: bool = Field(default=True, description="Tolerate namespaces that already exist")

    # Values applied by PATCH /deployment/{name}/namespace/{namespace}
    UPDATE_REPLICAS: int = Field(default=1, ge=0)
    UPDATE_IMAGE: str = Field(default="nginx:1.13")

    # Conflict retry
    RETRY_MAX_ATTEMPTS: int = Field(default=5, ge=1)
    RETRY_INITIAL_DELAY_SECS: float = Field(default=0.01, ge=0)
    RETRY_BACKOFF_FACTOR: float = Field(default=2.0, ge=1)
    RETRY_MAX_DELAY_SECS: float = Field(default=1.0, ge=0)
    RETRY_JITTER: float = Field(default=0.1, ge=0)
    RETRY_DEADLINE_SECS: Optional[float] = Field(default=None, gt=0)


def load_kube_config(settings: Settings):
    """
    Load in-cluster configuration, falling back to the local kubeconfig file.
    """
    try:
        k8s_config.load_incluster_config()
        logger.info("Loaded in-cluster Kubernetes configuration")
        return
    except k8s_config.ConfigException as e:
        logger.debug(f"In-cluster configuration unavailable: {e}")

    try:
        k8s_config.load_kube_config(config_file=settings.KUBECONFIG, context=settings.K8S_CONTEXT)
    except (k8s_config.ConfigException, OSError) as e:
        raise ClientConfigError(
            "Failed to configure client. Must run in cluster with a service account "
            f"or must have an available config file at {settings.KUBECONFIG}: {e}"
        ) from e
    logger.info(f"Loaded Kubernetes configuration from {settings.KUBECONFIG}")


def load_k8s_config(settings: Settings):
    """
    Load configuration once and return (CoreV1Api, AppsV1Api).
    """
    load_kube_config(settings)
    return client.CoreV1Api(), client.AppsV1Api()
