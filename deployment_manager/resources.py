"""
Kubernetes resource client used by the deployment manager.

Wraps ``CoreV1Api``/``AppsV1Api`` and turns API failures into the errors of
``deployment_manager.exceptions`` so callers can tell "not found",
"already exists" and "version conflict" apart from generic failures.
"""
import logging
from typing import List

from kubernetes import client
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

from .exceptions import AlreadyExistsError, BackendError, ConflictError, NotFoundError

logger = logging.getLogger(__name__)

FOREGROUND = "Foreground"


def _translate(e: Exception, what: str, on_conflict=BackendError):
    if isinstance(e, ApiException):
        if e.status == 404:
            return NotFoundError(f"{what}: not found")
        if e.status == 409:
            return on_conflict(f"{what}: {e.reason}")
        return BackendError(f"{what}: {e.reason}", status=e.status)
    return BackendError(f"{what}: {e}")


class KubeResourceClient:
    """Namespaced deployment and namespace operations against the API server."""

    def __init__(self, core_v1: client.CoreV1Api, apps_v1: client.AppsV1Api, request_timeout: float = 30):
        self.core_v1 = core_v1
        self.apps_v1 = apps_v1
        self.request_timeout = request_timeout

    def get_deployment(self, namespace: str, name: str) -> client.V1Deployment:
        try:
            return self.apps_v1.read_namespaced_deployment(
                name=name, namespace=namespace, _request_timeout=self.request_timeout
            )
        except (ApiException, HTTPError) as e:
            raise _translate(e, f"get deployment {namespace}/{name}") from e

    def create_deployment(self, namespace: str, body: client.V1Deployment) -> client.V1Deployment:
        try:
            return self.apps_v1.create_namespaced_deployment(
                namespace=namespace, body=body, _request_timeout=self.request_timeout
            )
        except (ApiException, HTTPError) as e:
            raise _translate(e, f"create deployment {namespace}/{body.metadata.name}", AlreadyExistsError) from e

    def update_deployment(self, namespace: str, name: str, body: client.V1Deployment) -> client.V1Deployment:
        """Replace the deployment; the server rejects a stale ``metadata.resource_version``."""
        try:
            return self.apps_v1.replace_namespaced_deployment(
                name=name, namespace=namespace, body=body, _request_timeout=self.request_timeout
            )
        except (ApiException, HTTPError) as e:
            raise _translate(e, f"update deployment {namespace}/{name}", ConflictError) from e

    def list_deployments(self, namespace: str) -> List[client.V1Deployment]:
        try:
            resp = self.apps_v1.list_namespaced_deployment(
                namespace=namespace, _request_timeout=self.request_timeout
            )
        except (ApiException, HTTPError) as e:
            raise _translate(e, f"list deployments in {namespace}") from e
        return list(resp.items)

    def delete_deployment(self, namespace: str, name: str) -> None:
        try:
            self.apps_v1.delete_namespaced_deployment(
                name=name,
                namespace=namespace,
                propagation_policy=FOREGROUND,
                _request_timeout=self.request_timeout,
            )
        except (ApiException, HTTPError) as e:
            raise _translate(e, f"delete deployment {namespace}/{name}") from e

    def create_namespace(self, name: str) -> client.V1Namespace:
        body = client.V1Namespace(metadata=client.V1ObjectMeta(name=name))
        try:
            return self.core_v1.create_namespace(body, _request_timeout=self.request_timeout)
        except (ApiException, HTTPError) as e:
            raise _translate(e, f"create namespace {name}", AlreadyExistsError) from e
