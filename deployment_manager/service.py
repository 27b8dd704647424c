"""
Deployment lifecycle operations behind the HTTP routes.
"""
import logging
from typing import List

from kubernetes import client

from .exceptions import DeploymentManagerError
from .models import DeploymentRequest, DeploymentSummary
from .namespaces import NamespaceProvisioner, NamespaceStatus
from .template import build_deployment
from .updater import ConflictRetryUpdater, UpdateResult

logger = logging.getLogger(__name__)


class DeploymentManager:
    def __init__(self, resource_client, provisioner: NamespaceProvisioner, updater: ConflictRetryUpdater, settings):
        self.resource_client = resource_client
        self.provisioner = provisioner
        self.updater = updater
        self.settings = settings

    def create(self, req: DeploymentRequest) -> str:
        """
        Build the deployment, provision its namespace, then submit it.

        Returns the name the API server reports for the created deployment.
        """
        logger.info("Creating deployment...")
        body = build_deployment(
            req.image,
            req.namespace,
            replicas=self.settings.DEFAULT_REPLICAS,
            container_name=self.settings.CONTAINER_NAME,
            port_name=self.settings.CONTAINER_PORT_NAME,
            container_port=self.settings.CONTAINER_PORT,
        )
        outcome = self.provisioner.ensure(req.namespace)
        try:
            result = self.resource_client.create_deployment(req.namespace, body)
        except DeploymentManagerError as e:
            if outcome.status is NamespaceStatus.FAILED:
                e.args = (f"{e} (namespace provisioning failed: {outcome.error})",)
                raise e from outcome.error
            raise
        name = result.metadata.name
        logger.info(f"Created deployment {name!r}.")
        return name

    def list(self, namespace: str) -> List[DeploymentSummary]:
        logger.info(f"Listing deployments in namespace {namespace!r}:")
        summaries = []
        for d in self.resource_client.list_deployments(namespace):
            replicas = (d.spec.replicas or 0) if d.spec else 0
            logger.info(f" * {d.metadata.name} ({replicas} replicas)")
            summaries.append(DeploymentSummary(name=d.metadata.name, replicas=replicas))
        return summaries

    def update(self, namespace: str, name: str) -> UpdateResult:
        """Apply the configured replica count and image under conflict retry."""
        logger.info("Updating deployment...")
        result = self.updater.update(namespace, name, self._fixed_mutation)
        logger.info("Updated deployment...")
        return result

    def _fixed_mutation(self, current: client.V1Deployment) -> client.V1Deployment:
        current.spec.replicas = self.settings.UPDATE_REPLICAS
        current.spec.template.spec.containers[0].image = self.settings.UPDATE_IMAGE
        return current

    def delete(self, namespace: str, name: str) -> None:
        logger.info("Deleting deployment...")
        self.resource_client.delete_deployment(namespace, name)
        logger.info("Deleted deployment.")
