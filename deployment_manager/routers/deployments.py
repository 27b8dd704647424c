import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse

from ..exceptions import DeploymentManagerError
from ..models import DeploymentRequest
from ..service import DeploymentManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/deployment", tags=["deployments"])


def get_manager(request: Request) -> DeploymentManager:
    return request.app.state.manager


@router.get("/namespace/{namespace}", response_class=PlainTextResponse, name="deployments_list")
def list_deployments(namespace: str, manager: DeploymentManager = Depends(get_manager)):
    """
    List deployments in a namespace, one "name replicas" line each.
    """
    try:
        items = manager.list(namespace)
    except DeploymentManagerError as e:
        raise HTTPException(status_code=e.status, detail=str(e))
    return "".join(f"{d.name} {d.replicas}\n" for d in items)


@router.post("", response_class=PlainTextResponse, name="deployments_create")
def create_deployment(spec: DeploymentRequest, manager: DeploymentManager = Depends(get_manager)):
    """
    Create a deployment named after the image with non-alphanumerics removed.
    """
    try:
        name = manager.create(spec)
    except DeploymentManagerError as e:
        logger.error(f"Create deployment failed: {e}")
        raise HTTPException(status_code=e.status, detail=str(e))
    return f"Created deployment {name}"


@router.patch("/{name}/namespace/{namespace}", response_class=PlainTextResponse, name="deployments_update")
def update_deployment(name: str, namespace: str, manager: DeploymentManager = Depends(get_manager)):
    try:
        manager.update(namespace, name)
    except DeploymentManagerError as e:
        logger.error(str(e))
        raise HTTPException(status_code=e.status, detail=str(e))
    return "Updated deployment..."


@router.delete("/{name}/namespace/{namespace}", response_class=PlainTextResponse, name="deployments_delete")
def delete_deployment(name: str, namespace: str, manager: DeploymentManager = Depends(get_manager)):
    """
    Delete a deployment with Foreground propagation; 500 on failure.
    """
    try:
        manager.delete(namespace, name)
    except DeploymentManagerError as e:
        logger.error(str(e))
        return PlainTextResponse(str(e), status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return "Deleted deployment."
