"""Exceptions raised while driving DRBD Manage."""


class DrbdManageError(Exception):
    """Base class for all drbdflex errors."""


class InvalidRequestError(DrbdManageError, ValueError):
    """Caller supplied input of the wrong shape (size, device path, option)."""


class ProtocolError(DrbdManageError):
    """DRBD Manage output did not match the expected record shape."""

    def __init__(self, message: str, raw: str = "", expected: str = ""):
        super().__init__(message)
        self.raw = raw
        self.expected = expected


class NotConvergedError(DrbdManageError):
    """An assignment exists but its current state differs from its target."""

    def __init__(self, current: str, target: str, context: str = ""):
        message = f"assignment target state {target!r} differs from current state {current!r}"
        super().__init__(f"{context}: {message}" if context else message)
        self.current = current
        self.target = target


class CommandError(DrbdManageError):
    """An external command could not be launched or exited non-zero."""

    def __init__(
        self,
        message: str,
        argv: list[str] | None = None,
        returncode: int | None = None,
        output: str = "",
    ):
        super().__init__(message)
        self.argv = list(argv or [])
        self.returncode = returncode
        self.output = output


class CapacityCheckError(DrbdManageError):
    """Free space could not be verified, so the request is refused."""


class InsufficientSpaceError(DrbdManageError):
    """The cluster does not have room for the requested resource."""

    def __init__(self, requested: int, available: int):
        super().__init__(
            "not enough space available to provision a new resource: "
            f"want {requested}KiB have {available}KiB"
        )
        self.requested = requested
        self.available = available


class ResourceNotFoundError(DrbdManageError):
    """The resource is not defined in DRBD Manage."""


class UnassignError(DrbdManageError):
    """Unassignment could not be observed because DRBD Manage failed."""


class StillAssignedError(DrbdManageError):
    """Unassignment was requested but the assignment never went away."""


class DeviceNotFoundError(DrbdManageError):
    """The resource's block device is not present on this node."""


class FormatError(DrbdManageError):
    """A device could not be (or must not be) formatted."""


class IgnoredVolumeError(DrbdManageError):
    """The volume belongs to another provisioner and is left alone."""
