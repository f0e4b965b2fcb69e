"""Shared fixtures: a scripted command runner and fast settings."""

import pytest

from drbdflex.core.config import Settings
from drbdflex.drbdmanage.command import CommandResult, CommandRunner


class FakeRunner(CommandRunner):
    """
    Scripted stand-in for drbdmanage and the helper tools.

    Responses are registered against an argv prefix. Each call consumes the
    next queued response; the last one repeats. Unscripted commands succeed
    with no output.
    """

    def __init__(self):
        super().__init__(binary="drbdmanage")
        self.calls: list[list[str]] = []
        self._responses: dict[tuple[str, ...], list[tuple[int, str]]] = {}

    def on(self, *prefix: str, output: str = "", returncode: int = 0) -> "FakeRunner":
        """Queue a response for commands starting with ``prefix``."""
        self._responses.setdefault(tuple(prefix), []).append((returncode, output))
        return self

    def execute(self, argv: list[str]) -> CommandResult:
        self.calls.append(list(argv))

        matches = [key for key in self._responses if tuple(argv[: len(key)]) == key]
        if not matches:
            return CommandResult(argv=list(argv), returncode=0, output="")

        queue = self._responses[max(matches, key=len)]
        returncode, output = queue.pop(0) if len(queue) > 1 else queue[0]
        return CommandResult(argv=list(argv), returncode=returncode, output=output)

    def subcommands(self, name: str) -> list[list[str]]:
        """Recorded drbdmanage calls for one subcommand."""
        return [c for c in self.calls if c[0] == self.binary and len(c) > 1 and c[1] == name]


@pytest.fixture
def runner():
    """Create a scripted command runner."""
    return FakeRunner()


@pytest.fixture
def settings():
    """Settings with no sleeping between poll attempts."""
    return Settings(
        _env_file=None,
        poll_interval=0,
        device_poll_interval=0,
        recovery_settle=0,
        provisioner_id="test-provisioner-id",
    )
