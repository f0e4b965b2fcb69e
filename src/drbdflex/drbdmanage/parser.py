"""Parsers for DRBD Manage machine-readable output.

DRBD Manage prints one record per line with comma-separated fields when run
with ``--machine-readable``. The field counts are the protocol: assignment
records have 5 fields, volume records have 7. A bad assignment record is a
protocol error, a bad volume record is skipped so that one garbled row does
not hide the others.
"""

import re
from dataclasses import dataclass

from .errors import (
    CapacityCheckError,
    InsufficientSpaceError,
    InvalidRequestError,
    NotConvergedError,
    ProtocolError,
)

# Printed by drbdmanage after talking to D-Bus. It shows up before or after
# the payload depending on buffering.
WRAPPER_TEXT = "Operation completed successfully"

ASSIGNMENT_FIELDS = 5
VOLUME_FIELDS = 7

DISKLESS_CLIENT_STATE = "connect|deploy|diskless"
ERROR_MARKER = "Error:"
FS_TYPE_KEY = "ID_FS_TYPE"

DEVICE_PREFIX = "/dev/drbd"

_STATE_RE = re.compile(r"[a-z_]+(\|[a-z_]+)*")
_DEVICE_RE = re.compile(re.escape(DEVICE_PREFIX) + r"([0-9]+)")
_INT_RE = re.compile(r"-?[0-9]+")
_DIGITS_RE = re.compile(r"[0-9]+")


def strip_output(raw: bytes | str) -> str:
    """Trim whitespace and the D-Bus success banner from either end."""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    text = raw.strip()
    text = text.removesuffix(WRAPPER_TEXT)
    text = text.removeprefix(WRAPPER_TEXT)
    return text.strip()


@dataclass(frozen=True)
class AssignmentState:
    """A ``|``-separated set of assignment flags, e.g. ``connect|deploy``."""

    text: str

    @classmethod
    def parse(cls, value: str) -> "AssignmentState":
        text = value.strip()
        if text and not _STATE_RE.fullmatch(text):
            raise ProtocolError(
                f"unrecognized assignment state {text!r}",
                raw=value,
                expected="flag[|flag...]",
            )
        return cls(text)

    @property
    def flags(self) -> tuple[str, ...]:
        return tuple(self.text.split("|")) if self.text else ()

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class AssignmentFact:
    """One ``list-assignments`` record."""

    resource_name: str
    node_name: str
    current_state: AssignmentState
    target_state: AssignmentState

    @property
    def converged(self) -> bool:
        return self.current_state == self.target_state

    @property
    def is_diskless_client(self) -> bool:
        return self.target_state.text == DISKLESS_CLIENT_STATE


@dataclass(frozen=True)
class VolumeFact:
    """One ``list-volumes`` record."""

    fields: tuple[str, ...]

    @property
    def resource_name(self) -> str:
        return self.fields[0]

    @property
    def volume_id(self) -> str:
        return self.fields[1]

    @property
    def minor(self) -> str:
        return self.fields[5]

    @property
    def device_path(self) -> str:
        """Kernel device for this volume.

        Raises:
            ProtocolError: If the minor number is not numeric
        """
        if not _DIGITS_RE.fullmatch(self.minor):
            raise ProtocolError(
                f"bad device minor {self.minor!r} in volume string: {','.join(self.fields)!r}",
                raw=",".join(self.fields),
                expected="numeric minor in field 5",
            )
        return DEVICE_PREFIX + self.minor


def resource_exists(name: str, output: str) -> bool:
    """Interpret ``list-resources --resources NAME`` output."""
    output = output.strip()
    if output == "":
        return False
    if output.split(",")[0] != name:
        raise ProtocolError(
            f"error retrieving resource information from the following output: {output!r}",
            raw=output,
            expected=f"first field {name!r}",
        )
    return True


def parse_assignment(line: str) -> AssignmentFact:
    """Parse a single assignment record."""
    fields = line.split(",")
    if len(fields) != ASSIGNMENT_FIELDS:
        raise ProtocolError(
            f"malformed assignment info: {line!r}",
            raw=line,
            expected=f"{ASSIGNMENT_FIELDS} comma-separated fields",
        )
    return AssignmentFact(
        resource_name=fields[0].strip(),
        node_name=fields[1].strip(),
        current_state=AssignmentState.parse(fields[3]),
        target_state=AssignmentState.parse(fields[4]),
    )


def assignments_converged(output: str) -> bool:
    """
    Check that every assignment in ``output`` reached its target state.

    Returns:
        False when there is no assignment, True when all records converged

    Raises:
        NotConvergedError: On the first record whose states differ
        ProtocolError: On a malformed record
    """
    for line in output.strip().split("\n"):
        if line == "":
            return False
        fact = parse_assignment(line)
        if not fact.converged:
            raise NotConvergedError(
                current=fact.current_state.text, target=fact.target_state.text
            )
    return True


def is_diskless_client(output: str) -> bool:
    """Best effort: any irregularity means "not a client"."""
    fields = output.strip().split(",")
    if len(fields) != ASSIGNMENT_FIELDS:
        return False
    # Only the target state matters; the current state is not validated.
    return fields[4].strip() == DISKLESS_CLIENT_STATE


def parse_volumes(output: str) -> list[VolumeFact]:
    """Parse ``list-volumes`` output, skipping malformed lines."""
    volumes = []
    for line in output.split("\n"):
        fields = line.split(",")
        if len(fields) != VOLUME_FIELDS:
            continue
        volumes.append(VolumeFact(tuple(fields)))
    return volumes


def find_volume(
    output: str, resource_name: str | None = None, minor: str | None = None
) -> VolumeFact | None:
    """Return the first volume matching the given name and/or minor."""
    for volume in parse_volumes(output):
        if resource_name is not None and volume.resource_name != resource_name:
            continue
        if minor is not None and volume.minor != minor:
            continue
        return volume
    return None


def resource_name_for_minor(output: str, minor: str) -> str:
    volume = find_volume(output, minor=minor)
    return volume.resource_name if volume else ""


def minor_from_device(device: str) -> str:
    """Extract the minor number from a ``/dev/drbdN`` path."""
    match = _DEVICE_RE.fullmatch(device)
    if not match:
        raise InvalidRequestError(
            f"tried to get minor from non-DRBD device: {device!r}"
        )
    return match.group(1)


def parse_positive_int(value: str, what: str) -> int:
    if not _INT_RE.fullmatch(value) or int(value) < 1:
        raise InvalidRequestError(f"{what} must be a positive integer, got {value!r}")
    return int(value)


def parse_requested_kib(requested_kib: str) -> int:
    return parse_positive_int(requested_kib, "requested storage")


def check_free_space(requested_kib: str, output: str) -> int:
    """
    Decide whether ``requested_kib`` fits in the reported free space.

    Args:
        requested_kib: Requested size in KiB, as text
        output: ``list-free-space -m`` output, first field is free KiB

    Returns:
        Free KiB reported by DRBD Manage

    Raises:
        InvalidRequestError: If the request is not a positive integer
        CapacityCheckError: If DRBD Manage reported an error or the output
            cannot be parsed
        InsufficientSpaceError: If the request does not fit (strictly)
    """
    request = parse_requested_kib(requested_kib)

    if output.startswith(ERROR_MARKER):
        raise CapacityCheckError(output.strip())

    free_field = output.split(",")[0].strip()
    if not _DIGITS_RE.fullmatch(free_field):
        raise CapacityCheckError(f"unable to determine free space: {output!r}")
    free = int(free_field)

    if not request < free:
        raise InsufficientSpaceError(requested=request, available=free)
    return free


def parse_fs_type(text: str) -> str:
    """
    Parse the filesystem type out of ``blkid -o udev`` output.

    An empty result means the device carries no filesystem.
    """
    pairs = text.split()
    if not pairs:
        return ""

    attrs = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep:
            raise ProtocolError(
                f"couldn't parse filesystem data from {text!r}",
                raw=text,
                expected="KEY=VALUE pairs",
            )
        attrs[key] = value

    if FS_TYPE_KEY not in attrs:
        raise ProtocolError(
            f"couldn't find {FS_TYPE_KEY} in {attrs}",
            raw=text,
            expected=f"{FS_TYPE_KEY}=<type>",
        )
    return attrs[FS_TYPE_KEY]
