"""Resource Model - a DRBD Manage resource and the intents that act on it."""

import logging
import os
from dataclasses import dataclass, field

from ..core.config import Settings, get_settings
from .capacity import enough_free_space
from .command import CommandRunner
from .errors import (
    CommandError,
    DeviceNotFoundError,
    DrbdManageError,
    InvalidRequestError,
    NotConvergedError,
    ProtocolError,
    ResourceNotFoundError,
    StillAssignedError,
    UnassignError,
)
from .parser import (
    assignments_converged,
    find_volume,
    is_diskless_client,
    minor_from_device,
    resource_exists,
    resource_name_for_minor,
)
from .poller import ConvergencePoller, ResumeAll

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resource:
    """
    Handle on a DRBD Manage resource.

    A Resource holds no state of its own: every intent asks DRBD Manage.
    Deploying needs ``redundancy``; node-scoped intents (assign, unassign,
    is_client) need ``node_name``.
    """

    name: str
    node_name: str = ""
    redundancy: str = ""
    settings: Settings = field(default_factory=get_settings, compare=False, repr=False)
    runner: CommandRunner | None = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        if not self.name:
            raise InvalidRequestError("resource name must not be empty")
        if self.runner is None:
            object.__setattr__(self, "runner", CommandRunner.from_settings(self.settings))

    # Queries

    def exists(self) -> bool:
        """Check whether the resource is defined in DRBD Manage."""
        output = self.runner.drbdmanage(
            "list-resources", "--resources", self.name, "--machine-readable"
        )
        return resource_exists(self.name, output)

    def is_assigned(self) -> bool:
        """
        Check whether every assignment of this resource has converged.

        Scoped to ``node_name`` when one is set.

        Raises:
            NotConvergedError: An assignment is still changing state
            ProtocolError: Malformed assignment output
            CommandError: drbdmanage failed
        """
        args = ["list-assignments", "--resources", self.name, "--machine-readable"]
        if self.node_name:
            args += ["--nodes", self.node_name]

        output = self.runner.drbdmanage(*args)
        return assignments_converged(output)

    def is_client(self) -> bool:
        """Best effort: True if the resource is a diskless client on ``node_name``."""
        try:
            output = self.runner.drbdmanage(
                "list-assignments",
                "--resources",
                self.name,
                "--nodes",
                self.node_name,
                "--machine-readable",
            )
        except DrbdManageError:
            return False
        return is_diskless_client(output)

    # Intents

    def assign(self) -> bool:
        """
        Assign the resource to ``node_name`` as a diskless client.

        Already assigned resources are left alone.

        Returns:
            True once the assignment converged, False if DRBD Manage reports
            no assignment after waiting

        Raises:
            ResourceNotFoundError: The resource is not defined
        """
        self._require_node("assign")

        try:
            defined = self.exists()
        except DrbdManageError as e:
            raise self._in_context(e, "assign") from e
        if not defined:
            raise ResourceNotFoundError(
                f"resource {self.name!r} is not defined, cannot assign it to node {self.node_name!r}"
            )

        try:
            if self.is_assigned():
                logger.debug("resource %s already assigned to %s", self.name, self.node_name)
                return True

            self.runner.drbdmanage("assign-resource", self.name, self.node_name, "--client")
            assigned = self.wait_for_assignment(self.settings.assign_retries)
        except DrbdManageError as e:
            raise self._in_context(e, "assign") from e

        if assigned:
            logger.info("resource %s assigned to %s", self.name, self.node_name)
        return assigned

    def unassign(self) -> None:
        """
        Remove the resource's assignment from ``node_name``.

        Raises:
            UnassignError: DRBD Manage failed while unassigning or polling
            StillAssignedError: The assignment was still present after waiting
        """
        self._require_node("unassign")

        try:
            self.runner.drbdmanage(
                "unassign-resource", self.name, self.node_name, "--quiet"
            )
            unassigned = self.wait_for_unassignment(self.settings.unassign_retries)
        except DrbdManageError as e:
            raise UnassignError(
                f"failed to unassign resource {self.name!r} from node {self.node_name!r}. "
                f"Error: {e}"
            ) from e

        if not unassigned:
            raise StillAssignedError(
                f"failed to unassign resource {self.name!r} from node {self.node_name!r}. "
                "Error: Resource still assigned"
            )
        logger.info("resource %s unassigned from %s", self.name, self.node_name)

    def wait_for_assignment(self, max_retries: int) -> bool:
        """Poll until the resource is assigned."""
        return self._poller(self.is_assigned, max_retries).wait()

    def wait_for_unassignment(self, max_retries: int) -> bool:
        """Poll until the resource is no longer assigned."""
        return self._poller(lambda: not self.is_assigned(), max_retries).wait()

    def create(self, size_kib: int | str) -> None:
        """
        Define the resource with one volume and deploy it.

        The free-space check runs first; nothing is created if it fails.
        """
        redundancy = self.redundancy or self.settings.default_redundancy
        enough_free_space(str(size_kib), redundancy, self.runner)

        try:
            self.runner.drbdmanage(
                "add-volume", self.name, f"{size_kib}KiB", "--deploy", redundancy
            )
        except CommandError as e:
            raise CommandError(
                f"unable to create resource {self.name!r} ({size_kib}KiB x{redundancy}): {e.output}",
                argv=e.argv,
                returncode=e.returncode,
                output=e.output,
            ) from e

        if not self.exists():
            raise ResourceNotFoundError(
                f"resource {self.name!r} not listed after creation"
            )
        logger.info("resource %s created (%sKiB x%s)", self.name, size_kib, redundancy)

    def delete(self) -> None:
        """Remove the resource from the cluster."""
        try:
            self.runner.drbdmanage("remove-resource", "--quiet", self.name)
        except CommandError as e:
            raise CommandError(
                f"unable to delete resource {self.name!r}: {e.output}",
                argv=e.argv,
                returncode=e.returncode,
                output=e.output,
            ) from e
        logger.info("resource %s deleted", self.name)

    # Devices

    def device_path(self) -> str:
        """
        Resolve the resource's local block device.

        Raises:
            DeviceNotFoundError: Not configured, or the device node is missing
            ProtocolError: No well-formed volume record for this resource
        """
        output = self.runner.drbdmanage(
            "list-volumes", "--resources", self.name, "--machine-readable"
        )
        if output == "":
            raise DeviceNotFoundError(f"resource {self.name!r} is not configured")

        volume = find_volume(output, resource_name=self.name)
        if volume is None:
            raise ProtocolError(
                f"malformed volume string for resource {self.name!r}: {output!r}",
                raw=output,
                expected="7 comma-separated fields",
            )

        path = volume.device_path
        try:
            os.lstat(path)
        except OSError as e:
            raise DeviceNotFoundError(
                f"couldn't stat {path} for resource {self.name!r}: {e}"
            ) from e
        return path

    def wait_for_device_path(self, max_retries: int | None = None) -> str:
        """Poll until the device node appears; the last failure is raised."""
        found = {}

        def check() -> bool:
            found["path"] = self.device_path()
            return True

        ConvergencePoller(
            check,
            max_retries=(
                self.settings.device_path_retries if max_retries is None else max_retries
            ),
            interval=self.settings.device_poll_interval,
        ).wait()
        return found["path"]

    def _poller(self, check, max_retries: int) -> ConvergencePoller:
        return ConvergencePoller(
            check,
            max_retries=max_retries,
            interval=self.settings.poll_interval,
            recovery=ResumeAll(self.runner, settle=self.settings.recovery_settle),
        )

    def _in_context(self, error: DrbdManageError, action: str) -> DrbdManageError:
        """Copy ``error`` with a message naming this resource and node."""
        context = f"unable to {action} resource {self.name!r} on node {self.node_name!r}"
        if isinstance(error, NotConvergedError):
            return NotConvergedError(error.current, error.target, context=context)
        if isinstance(error, ProtocolError):
            return ProtocolError(f"{context}: {error}", raw=error.raw, expected=error.expected)
        if isinstance(error, CommandError):
            return CommandError(
                f"{context}: {error.output or error}",
                argv=error.argv,
                returncode=error.returncode,
                output=error.output,
            )
        return type(error)(f"{context}: {error}")

    def _require_node(self, action: str) -> None:
        if not self.node_name:
            raise InvalidRequestError(
                f"cannot {action} resource {self.name!r}: no node name given"
            )


def resource_name_from_device(device: str, runner: CommandRunner | None = None) -> str:
    """
    Find the resource that owns a ``/dev/drbdN`` device.

    Returns:
        Resource name, or "" if no volume uses that minor
    """
    minor = minor_from_device(device)

    runner = runner or CommandRunner.from_settings()
    try:
        output = runner.drbdmanage("list-volumes", "--machine-readable")
    except CommandError as e:
        raise CommandError(
            f"unable to get volume information: {e.output}",
            argv=e.argv,
            returncode=e.returncode,
            output=e.output,
        ) from e

    return resource_name_for_minor(output, minor)
