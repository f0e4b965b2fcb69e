"""DRBD Manage client - resource lifecycle and convergence polling."""

from .capacity import enough_free_space
from .command import CommandResult, CommandRunner
from .errors import DrbdManageError
from .fsutil import Filesystem, FSUtil
from .poller import ConvergencePoller, ResumeAll
from .resource import Resource, resource_name_from_device

__all__ = [
    "CommandResult",
    "CommandRunner",
    "ConvergencePoller",
    "DrbdManageError",
    "Filesystem",
    "FSUtil",
    "Resource",
    "ResumeAll",
    "enough_free_space",
    "resource_name_from_device",
]
