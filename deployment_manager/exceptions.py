"""
Error taxonomy shared by the resource client, the updater and the HTTP layer.
"""
from typing import Optional


class DeploymentManagerError(Exception):
    """Base error; ``status`` is the HTTP status reported to callers."""

    status = 500


class ClientConfigError(DeploymentManagerError):
    """Kubernetes credentials could not be resolved."""


class NotFoundError(DeploymentManagerError):
    status = 404


class AlreadyExistsError(DeploymentManagerError):
    status = 409


class ConflictError(DeploymentManagerError):
    """The presented resourceVersion is stale."""

    status = 409


class BackendError(DeploymentManagerError):
    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        if status:
            self.status = status


class UpdateFailedError(DeploymentManagerError):
    """Raised by the conflict-retry updater when an update cannot be committed."""

    def __init__(self, message: str, attempts: int, cause: Optional[Exception] = None):
        super().__init__(message)
        self.attempts = attempts
        self.cause = cause
        if isinstance(cause, DeploymentManagerError):
            self.status = cause.status
