"""Volume API routes."""

from fastapi import APIRouter, Depends, status

from ..dependencies import get_provisioner
from ..errors import to_http_exception
from ...core.provisioner import PersistentVolume, Provisioner, VolumeClaim
from ...drbdmanage.errors import DrbdManageError

router = APIRouter(prefix="/volumes", tags=["volumes"])


@router.post("", response_model=PersistentVolume, status_code=status.HTTP_201_CREATED)
def provision_volume(
    claim: VolumeClaim, provisioner: Provisioner = Depends(get_provisioner)
):
    """Provision a volume for a claim."""
    try:
        return provisioner.provision(claim)
    except DrbdManageError as e:
        raise to_http_exception(e)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def delete_volume(
    volume: PersistentVolume, provisioner: Provisioner = Depends(get_provisioner)
):
    """Delete a volume provisioned by this provisioner."""
    try:
        provisioner.delete(volume)
    except DrbdManageError as e:
        raise to_http_exception(e)
