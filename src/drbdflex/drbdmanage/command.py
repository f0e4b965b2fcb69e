"""Command runner - launches drbdmanage and helper tools."""

import logging
import subprocess
from dataclasses import dataclass

from ..core.config import Settings, get_settings
from .errors import CommandError
from .parser import strip_output

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Outcome of one process invocation."""

    argv: list[str]
    returncode: int
    output: str  # stdout and stderr combined

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """
    Runs external commands synchronously.

    Every call blocks until the process exits. Standard output and standard
    error are captured together, the way an operator would see them on a
    terminal.
    """

    def __init__(self, binary: str = "drbdmanage"):
        self.binary = binary

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "CommandRunner":
        settings = settings or get_settings()
        return cls(binary=settings.drbdmanage_bin)

    def execute(self, argv: list[str]) -> CommandResult:
        """
        Run ``argv`` and capture its combined output.

        Raises:
            CommandError: If the process could not be started
        """
        logger.debug("running %s", " ".join(argv))
        try:
            proc = subprocess.run(
                argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                check=False,
            )
        except OSError as e:
            raise CommandError(f"unable to run {argv[0]}: {e}", argv=argv) from e

        return CommandResult(argv=list(argv), returncode=proc.returncode, output=proc.stdout or "")

    def run(self, argv: list[str]) -> str:
        """Run a command and return its trimmed output, failing on non-zero exit."""
        result = self.execute(argv)
        output = result.output.strip()
        if not result.ok:
            self._fail(result, output)
        return output

    def drbdmanage(self, *args: str) -> str:
        """Run a drbdmanage subcommand and return its payload."""
        result = self.execute([self.binary, *args])
        output = strip_output(result.output)
        if not result.ok:
            self._fail(result, output)
        return output

    def _fail(self, result: CommandResult, output: str) -> None:
        logger.warning(
            "%s exited with status %d: %s", " ".join(result.argv), result.returncode, output
        )
        raise CommandError(
            f"{' '.join(result.argv)} exited with status {result.returncode}: {output}",
            argv=result.argv,
            returncode=result.returncode,
            output=output,
        )
