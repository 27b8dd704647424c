"""
Namespace provisioning performed before a deployment is created.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Optional

from .exceptions import AlreadyExistsError, DeploymentManagerError

logger = logging.getLogger(__name__)


class NamespaceStatus(str, enum.Enum):
    CREATED = "created"
    EXISTED = "existed"
    FAILED = "failed"


@dataclass
class NamespaceOutcome:
    namespace: str
    status: NamespaceStatus
    error: Optional[DeploymentManagerError] = None


class NamespaceProvisioner:
    """
    Creates the target namespace.

    Provisioning is best effort: with ``ignore_already_exists`` an existing
    namespace is reported as ``EXISTED``; any other failure is returned as
    ``FAILED`` rather than raised, and the deployment create that follows is
    where a missing namespace surfaces.
    """

    def __init__(self, resource_client, ignore_already_exists: bool = True):
        self.resource_client = resource_client
        self.ignore_already_exists = ignore_already_exists

    def ensure(self, namespace: str) -> NamespaceOutcome:
        try:
            self.resource_client.create_namespace(namespace)
        except AlreadyExistsError as e:
            if not self.ignore_already_exists:
                raise
            logger.info(f"Namespace {namespace} already exists")
            return NamespaceOutcome(namespace, NamespaceStatus.EXISTED, e)
        except DeploymentManagerError as e:
            logger.warning(f"Failed to create namespace {namespace}: {e}")
            return NamespaceOutcome(namespace, NamespaceStatus.FAILED, e)
        logger.info(f"Created namespace {namespace}")
        return NamespaceOutcome(namespace, NamespaceStatus.CREATED)
