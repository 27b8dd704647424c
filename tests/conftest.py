"""
Shared fixtures: an in-memory versioned deployment store standing in for the
API server, and a TestClient wired to it.
"""
import copy

import pytest
from fastapi.testclient import TestClient

from deployment_manager.config import Settings
from deployment_manager.exceptions import AlreadyExistsError, BackendError, ConflictError, NotFoundError
from deployment_manager.main import build_manager, create_app


class FakeResourceClient:
    """
    Keeps deployments keyed by (namespace, name) and bumps
    ``metadata.resource_version`` on every write, rejecting stale versions.
    """

    def __init__(self):
        self.namespaces = set()
        self.deployments = {}
        self.version = 0
        self.calls = []
        # number of updates that lose the race to a simulated concurrent writer
        self.concurrent_writes = 0
        self.fail_namespace_with = None

    def _bump(self, obj):
        self.version += 1
        obj.metadata.resource_version = str(self.version)

    def get_deployment(self, namespace, name):
        self.calls.append("get")
        try:
            return copy.deepcopy(self.deployments[(namespace, name)])
        except KeyError:
            raise NotFoundError(f"get deployment {namespace}/{name}: not found")

    def create_deployment(self, namespace, body):
        self.calls.append("create")
        name = body.metadata.name
        if not name:
            raise BackendError("create deployment: metadata.name: Required value", status=422)
        if namespace not in self.namespaces:
            raise NotFoundError(f"create deployment {namespace}/{name}: not found")
        if (namespace, name) in self.deployments:
            raise AlreadyExistsError(f"create deployment {namespace}/{name}: AlreadyExists")
        stored = copy.deepcopy(body)
        self._bump(stored)
        self.deployments[(namespace, name)] = stored
        return copy.deepcopy(stored)

    def update_deployment(self, namespace, name, body):
        self.calls.append("update")
        stored = self.deployments.get((namespace, name))
        if stored is None:
            raise NotFoundError(f"update deployment {namespace}/{name}: not found")
        if self.concurrent_writes:
            self.concurrent_writes -= 1
            self._bump(stored)
        if body.metadata.resource_version != stored.metadata.resource_version:
            raise ConflictError(f"update deployment {namespace}/{name}: Conflict")
        stored = copy.deepcopy(body)
        self._bump(stored)
        self.deployments[(namespace, name)] = stored
        return copy.deepcopy(stored)

    def list_deployments(self, namespace):
        self.calls.append("list")
        return [copy.deepcopy(d) for (ns, _), d in self.deployments.items() if ns == namespace]

    def delete_deployment(self, namespace, name):
        self.calls.append("delete")
        if self.deployments.pop((namespace, name), None) is None:
            raise NotFoundError(f"delete deployment {namespace}/{name}: not found")

    def create_namespace(self, name):
        self.calls.append("create_namespace")
        if self.fail_namespace_with is not None:
            raise self.fail_namespace_with
        if name in self.namespaces:
            raise AlreadyExistsError(f"create namespace {name}: AlreadyExists")
        self.namespaces.add(name)


@pytest.fixture
def settings():
    return Settings(_env_file=None, RETRY_INITIAL_DELAY_SECS=0, RETRY_JITTER=0)


@pytest.fixture
def store():
    return FakeResourceClient()


@pytest.fixture
def manager(settings, store):
    return build_manager(settings, resource_client=store)


@pytest.fixture
def client(settings, manager):
    with TestClient(create_app(settings, manager=manager)) as c:
        yield c
