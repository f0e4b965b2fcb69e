"""Request dependencies shared by the API routes."""

from fastapi import Depends

from ..core.config import Settings, get_settings
from ..core.provisioner import Provisioner
from ..drbdmanage.command import CommandRunner


def get_runner(settings: Settings = Depends(get_settings)) -> CommandRunner:
    """Command runner for the configured drbdmanage binary."""
    return CommandRunner.from_settings(settings)


def get_provisioner(
    settings: Settings = Depends(get_settings),
    runner: CommandRunner = Depends(get_runner),
) -> Provisioner:
    return Provisioner(settings=settings, runner=runner)
