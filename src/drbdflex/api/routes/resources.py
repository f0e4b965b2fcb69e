"""Resource API routes."""

from fastapi import APIRouter, Depends, HTTPException, status

from ..dependencies import get_runner
from ..errors import to_http_exception
from ..schemas.resource import (
    AssignResponse,
    DeviceResponse,
    FreeSpaceResponse,
    NodeRequest,
    ResourceStatusResponse,
)
from ...core.config import Settings, get_settings
from ...drbdmanage.capacity import enough_free_space
from ...drbdmanage.command import CommandRunner
from ...drbdmanage.errors import DrbdManageError, NotConvergedError
from ...drbdmanage.resource import Resource

router = APIRouter(prefix="/resources", tags=["resources"])

# Free-space checks are not tied to a resource
global_router = APIRouter(tags=["capacity"])


@router.get("/{name}", response_model=ResourceStatusResponse)
def get_resource(
    name: str,
    node: str = "",
    settings: Settings = Depends(get_settings),
    runner: CommandRunner = Depends(get_runner),
):
    """Get the state of a resource, optionally on one node."""
    resource = Resource(name=name, node_name=node, settings=settings, runner=runner)

    try:
        if not resource.exists():
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Resource {name} not found",
            )
        try:
            assigned = resource.is_assigned()
        except NotConvergedError:
            assigned = False
    except DrbdManageError as e:
        raise to_http_exception(e)

    return ResourceStatusResponse(
        name=name,
        node_name=node,
        exists=True,
        assigned=assigned,
        is_client=resource.is_client() if node else False,
    )


@router.post("/{name}/assign", response_model=AssignResponse)
def assign_resource(
    name: str,
    request: NodeRequest,
    settings: Settings = Depends(get_settings),
    runner: CommandRunner = Depends(get_runner),
):
    """Assign a resource to a node as a diskless client."""
    resource = Resource(
        name=name, node_name=request.node_name, settings=settings, runner=runner
    )

    try:
        assigned = resource.assign()
    except DrbdManageError as e:
        raise to_http_exception(e)

    return AssignResponse(name=name, node_name=request.node_name, assigned=assigned)


@router.post("/{name}/unassign", status_code=status.HTTP_204_NO_CONTENT)
def unassign_resource(
    name: str,
    request: NodeRequest,
    settings: Settings = Depends(get_settings),
    runner: CommandRunner = Depends(get_runner),
):
    """Remove a resource's assignment from a node."""
    resource = Resource(
        name=name, node_name=request.node_name, settings=settings, runner=runner
    )

    try:
        resource.unassign()
    except DrbdManageError as e:
        raise to_http_exception(e)


@router.get("/{name}/device", response_model=DeviceResponse)
def get_device(
    name: str,
    settings: Settings = Depends(get_settings),
    runner: CommandRunner = Depends(get_runner),
):
    """Resolve the local block device of a resource."""
    resource = Resource(name=name, settings=settings, runner=runner)

    try:
        device_path = resource.wait_for_device_path()
    except DrbdManageError as e:
        raise to_http_exception(e)

    return DeviceResponse(name=name, device_path=device_path)


@global_router.get("/free-space", response_model=FreeSpaceResponse)
def check_free_space(
    requested_kib: str,
    replicas: str,
    runner: CommandRunner = Depends(get_runner),
):
    """Check that a resource of the given size and replica count fits."""
    try:
        free_kib = enough_free_space(requested_kib, replicas, runner)
    except DrbdManageError as e:
        raise to_http_exception(e)

    return FreeSpaceResponse(
        requested_kib=int(requested_kib),
        replicas=int(replicas),
        free_kib=free_kib,
    )
