"""Resource API schemas."""

from pydantic import BaseModel, Field


class NodeRequest(BaseModel):
    """Request naming the node an assignment applies to."""

    node_name: str = Field(..., min_length=1, max_length=255)


class ResourceStatusResponse(BaseModel):
    """Resource status response."""

    name: str
    node_name: str
    exists: bool
    assigned: bool
    is_client: bool


class AssignResponse(BaseModel):
    """Assignment result."""

    name: str
    node_name: str
    assigned: bool


class DeviceResponse(BaseModel):
    """Local device of a resource."""

    name: str
    device_path: str


class FreeSpaceResponse(BaseModel):
    """Free-space check result."""

    requested_kib: int
    replicas: int
    free_kib: int
