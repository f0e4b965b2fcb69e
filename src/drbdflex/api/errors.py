"""Mapping of drbdflex errors to HTTP responses."""

from fastapi import HTTPException, status

from ..drbdmanage.errors import (
    CommandError,
    DeviceNotFoundError,
    DrbdManageError,
    IgnoredVolumeError,
    InsufficientSpaceError,
    InvalidRequestError,
    ResourceNotFoundError,
    StillAssignedError,
    UnassignError,
)

_STATUS_CODES = [
    (InvalidRequestError, status.HTTP_400_BAD_REQUEST),
    (ResourceNotFoundError, status.HTTP_404_NOT_FOUND),
    (DeviceNotFoundError, status.HTTP_404_NOT_FOUND),
    (IgnoredVolumeError, status.HTTP_409_CONFLICT),
    (StillAssignedError, status.HTTP_409_CONFLICT),
    (InsufficientSpaceError, status.HTTP_507_INSUFFICIENT_STORAGE),
    (UnassignError, status.HTTP_502_BAD_GATEWAY),
    (CommandError, status.HTTP_502_BAD_GATEWAY),
]


def to_http_exception(error: DrbdManageError) -> HTTPException:
    """Convert an error into an HTTPException carrying its message."""
    for error_type, status_code in _STATUS_CODES:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=str(error),
    )
