import logging
import sys

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, load_k8s_config
from .exceptions import ClientConfigError
from .namespaces import NamespaceProvisioner
from .resources import KubeResourceClient
from .routers import deployments
from .service import DeploymentManager
from .updater import ConflictRetryUpdater, RetryPolicy

logger = logging.getLogger(__name__)


def build_manager(settings: Settings, resource_client=None) -> DeploymentManager:
    if resource_client is None:
        core_v1, apps_v1 = load_k8s_config(settings)
        resource_client = KubeResourceClient(core_v1, apps_v1, request_timeout=settings.REQUEST_TIMEOUT_SECS)
    return DeploymentManager(
        resource_client,
        NamespaceProvisioner(resource_client, ignore_already_exists=settings.IGNORE_EXISTING_NAMESPACE),
        ConflictRetryUpdater(resource_client, RetryPolicy.from_settings(settings)),
        settings,
    )


def create_app(settings: Settings = None, manager: DeploymentManager = None) -> FastAPI:
    settings = settings or Settings()
    # ---------- Kubernetes client ----------
    manager = manager or build_manager(settings)

    # ---------- FastAPI app ----------
    app = FastAPI(title=settings.APP_NAME, version="v1")
    app.state.manager = manager

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health():
        return {"status": "healthy"}

    # ---------- Routers ----------
    app.include_router(deployments.router)
    return app


def main():
    settings = Settings()
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    try:
        app = create_app(settings)
    except ClientConfigError as e:
        logger.error(str(e))
        sys.exit(1)

    # ---------- Uvicorn ----------
    uvicorn.run(app, host=settings.HTTP_HOST, port=settings.HTTP_PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
