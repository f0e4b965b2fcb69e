"""Provisioner - turns volume claims into DRBD Manage resources."""

import logging

from pydantic import BaseModel, Field

from ..drbdmanage.command import CommandRunner
from ..drbdmanage.errors import IgnoredVolumeError, InvalidRequestError
from ..drbdmanage.fsutil import Filesystem
from ..drbdmanage.parser import parse_positive_int
from ..drbdmanage.resource import Resource
from .config import Settings, get_settings

logger = logging.getLogger(__name__)

ANN_CREATED_BY = "kubernetes.io/createdby"
CREATED_BY = "drbdmanage-flex-provisioner"
ANN_PROVISIONER_ID = "Provisioner_Id"


class ProvisionerOptions(BaseModel):
    """Storage-class parameters understood by the provisioner."""

    driver: str
    fs_type: Filesystem
    redundancy: str
    read_only: bool

    @classmethod
    def from_parameters(
        cls, parameters: dict[str, str], settings: Settings | None = None
    ) -> "ProvisionerOptions":
        """
        Build options from storage-class parameters.

        Keys are matched case-insensitively. Unknown keys are logged and
        ignored.
        """
        settings = settings or get_settings()
        driver = settings.driver
        fs_type = Filesystem.parse(settings.default_fs_type)
        redundancy = settings.default_redundancy
        read_only = settings.read_only

        for key, value in parameters.items():
            key = key.lower()
            if key == "driver":
                driver = value
            elif key in ("filesystem", "fstype"):
                fs_type = Filesystem.parse(value)
            elif key == "redundancy":
                parse_positive_int(value, "redundancy")
                redundancy = value
            elif key == "readonly":
                read_only = _parse_bool(value, read_only)
            else:
                logger.warning("unknown storage class parameter: %s", key)

        return cls(driver=driver, fs_type=fs_type, redundancy=redundancy, read_only=read_only)


class VolumeClaim(BaseModel):
    """A request for storage."""

    namespace: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    requested_bytes: int = Field(..., gt=0)
    access_modes: list[str] = Field(default_factory=lambda: ["ReadWriteOnce"])
    reclaim_policy: str = "Delete"
    parameters: dict[str, str] = Field(default_factory=dict)

    @property
    def resource_name(self) -> str:
        return f"{self.namespace}-{self.name}"


class FlexVolumeSource(BaseModel):
    """Flex-volume source of a persistent volume."""

    driver: str
    fs_type: str
    read_only: bool
    options: dict[str, str] = Field(default_factory=dict)


class PersistentVolume(BaseModel):
    """Volume object handed back to the orchestrator."""

    name: str
    annotations: dict[str, str] = Field(default_factory=dict)
    capacity_bytes: int
    access_modes: list[str]
    reclaim_policy: str
    flex_volume: FlexVolumeSource


def _parse_bool(value: str, default: bool) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "t", "true", "yes"):
        return True
    if lowered in ("0", "f", "false", "no"):
        return False
    return default


class Provisioner:
    """
    Provisions and deletes DRBD Manage backed volumes.

    Every provisioned volume is annotated with this provisioner's identity;
    volumes carrying another identity are never deleted.
    """

    def __init__(
        self, settings: Settings | None = None, runner: CommandRunner | None = None
    ):
        self.settings = settings or get_settings()
        self.runner = runner or CommandRunner.from_settings(self.settings)
        self.identity = self.settings.provisioner_id

    def provision(self, claim: VolumeClaim) -> PersistentVolume:
        """
        Create a resource for ``claim`` and describe it as a volume.

        Raises:
            InvalidRequestError: Bad storage-class parameters
            InsufficientSpaceError: The cluster cannot hold the volume
            CommandError: drbdmanage failed
        """
        options = ProvisionerOptions.from_parameters(claim.parameters, self.settings)
        size_kib = claim.requested_bytes // 1024 + 1

        resource = Resource(
            name=claim.resource_name,
            redundancy=options.redundancy,
            settings=self.settings,
            runner=self.runner,
        )
        resource.create(size_kib)
        logger.info(
            "provisioned %s for claim %s/%s", resource.name, claim.namespace, claim.name
        )

        return PersistentVolume(
            name=resource.name,
            annotations={
                ANN_CREATED_BY: CREATED_BY,
                ANN_PROVISIONER_ID: self.identity,
            },
            capacity_bytes=claim.requested_bytes,
            access_modes=claim.access_modes,
            reclaim_policy=claim.reclaim_policy,
            flex_volume=FlexVolumeSource(
                driver=options.driver,
                fs_type=options.fs_type.value,
                read_only=options.read_only,
                options={"redundancy": options.redundancy},
            ),
        )

    def provisioned(self, volume: PersistentVolume) -> bool:
        if ANN_PROVISIONER_ID not in volume.annotations:
            raise InvalidRequestError(
                f"volume {volume.name!r} doesn't have an annotation {ANN_PROVISIONER_ID}"
            )
        return volume.annotations[ANN_PROVISIONER_ID] == self.identity

    def delete(self, volume: PersistentVolume) -> None:
        """
        Remove the resource behind ``volume``.

        Raises:
            IgnoredVolumeError: Another provisioner owns the volume
        """
        if not self.provisioned(volume):
            raise IgnoredVolumeError(
                f"this provisioner id {self.identity} didn't provision volume "
                f"{volume.name!r} and so can't delete it; "
                f"id {volume.annotations[ANN_PROVISIONER_ID]} did & can"
            )

        Resource(name=volume.name, settings=self.settings, runner=self.runner).delete()
        logger.info("deleted volume %s", volume.name)
