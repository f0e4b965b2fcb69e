"""Free-Space Gate - pre-flight capacity check before creating a resource."""

import logging

from .command import CommandRunner
from .parser import check_free_space, parse_positive_int, parse_requested_kib

logger = logging.getLogger(__name__)


def enough_free_space(
    requested_kib: str, replicas: str, runner: CommandRunner | None = None
) -> int:
    """
    Verify that a resource of ``requested_kib`` fits with ``replicas`` copies.

    Input is validated before DRBD Manage is contacted, so a bad request
    never turns into a command failure.

    Args:
        requested_kib: Requested size in KiB, as text
        replicas: Replica count, as text
        runner: Command runner (defaults to one built from settings)

    Returns:
        Free KiB reported by DRBD Manage

    Raises:
        InvalidRequestError: Non-numeric or non-positive size or replica count
        CommandError: drbdmanage could not be run
        CapacityCheckError: Free space could not be determined
        InsufficientSpaceError: The request does not fit
    """
    parse_requested_kib(requested_kib)
    parse_positive_int(replicas, "replica count")

    runner = runner or CommandRunner.from_settings()
    output = runner.drbdmanage("list-free-space", "-m", replicas)

    free = check_free_space(requested_kib, output)
    logger.debug(
        "free space check passed: want %sKiB x%s, have %dKiB", requested_kib, replicas, free
    )
    return free
