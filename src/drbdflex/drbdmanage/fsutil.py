"""Filesystem helper - format and mount a resource's block device."""

import logging
from enum import Enum
from pathlib import Path

from .command import CommandRunner
from .errors import CommandError, FormatError, InvalidRequestError
from .parser import parse_fs_type
from .resource import Resource

logger = logging.getLogger(__name__)


class Filesystem(Enum):
    """Filesystems drbdflex will create."""

    EXT2 = "ext2"
    EXT3 = "ext3"
    EXT4 = "ext4"
    XFS = "xfs"
    BTRFS = "btrfs"

    @classmethod
    def parse(cls, value: str) -> "Filesystem":
        try:
            return cls(value.strip().lower())
        except ValueError:
            supported = ", ".join(fs.value for fs in cls)
            raise InvalidRequestError(
                f"unsupported filesystem {value!r}, expected one of: {supported}"
            ) from None


class FSUtil:
    """Creates a filesystem on a resource's device and mounts it."""

    def __init__(
        self,
        resource: Resource,
        fs_type: Filesystem | str,
        runner: CommandRunner | None = None,
    ):
        self.resource = resource
        self.fs_type = fs_type if isinstance(fs_type, Filesystem) else Filesystem.parse(fs_type)
        self.runner = runner or resource.runner

    def mount(self, path: str) -> None:
        """Mount the resource on ``path``, formatting it first if it is blank."""
        device = self.resource.wait_for_device_path()
        self.safe_format(device)

        Path(path).mkdir(parents=True, exist_ok=True)
        self.runner.run(["mount", device, path])
        logger.info("mounted %s (%s) on %s", device, self.resource.name, path)

    def unmount(self, path: str) -> None:
        """Unmount ``path``; a path that is not mounted is left alone."""
        if not Path(path).is_dir():
            return
        if not self.runner.execute(["findmnt", "-f", path]).ok:
            return

        self.runner.run(["umount", path])
        logger.info("unmounted %s", path)

    def check_fs_type(self, device: str) -> str:
        """Return the filesystem on ``device``, or "" if it has none."""
        # blkid exits non-zero with no output on a blank device.
        result = self.runner.execute(["blkid", "-o", "udev", device])
        return parse_fs_type(result.output)

    def safe_format(self, device: str) -> None:
        """
        Create the filesystem unless the device already has one.

        Raises:
            FormatError: The device holds a different filesystem, or mkfs failed
        """
        current = self.check_fs_type(device)
        wanted = self.fs_type.value

        if current == wanted:
            return
        if current:
            raise FormatError(
                f"device {device!r} already formatted with {current!r} filesystem, "
                f"refusing to overwrite with {wanted!r} filesystem"
            )

        try:
            self.runner.run(["mkfs", "-t", wanted, device])
        except CommandError as e:
            raise FormatError(f"couldn't create {wanted} filesystem on {device}: {e.output}") from e
        logger.info("created %s filesystem on %s", wanted, device)
