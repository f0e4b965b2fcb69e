"""Convergence Poller - waits for DRBD Manage to reach a target state."""

import logging
import time
from typing import Callable

from .command import CommandRunner
from .errors import DrbdManageError

logger = logging.getLogger(__name__)


class ResumeAll:
    """
    Recovery action run between poll attempts.

    Asks DRBD Manage to resume all pending or failed actions, then gives it
    time to settle. The result of ``resume-all`` is ignored.
    """

    def __init__(
        self,
        runner: CommandRunner,
        settle: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.runner = runner
        self.settle = settle
        self._sleep = sleep

    def __call__(self) -> None:
        try:
            self.runner.drbdmanage("resume-all")
        except DrbdManageError as e:
            logger.warning("resume-all failed, continuing to poll: %s", e)
        self._sleep(self.settle)


class ConvergencePoller:
    """
    Bounded retry loop around a state check.

    ``check`` returns True once the target state is reached. A False result
    or a DrbdManageError both mean "not yet" while retries remain. After
    ``max_retries`` attempts one last check runs and its result, or its
    exception, is the outcome.

    There is no cancellation: the loop ends on convergence or exhaustion.
    """

    def __init__(
        self,
        check: Callable[[], bool],
        max_retries: int,
        interval: float,
        recovery: Callable[[], None] | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.check = check
        self.max_retries = max_retries
        self.interval = interval
        self.recovery = recovery
        self._sleep = sleep
        self.attempts = 0

    def wait(self) -> bool:
        for attempt in range(1, self.max_retries + 1):
            self.attempts = attempt
            try:
                if self.check():
                    logger.debug("converged after %d attempt(s)", attempt)
                    return True
            except DrbdManageError as e:
                logger.debug("attempt %d/%d not converged: %s", attempt, self.max_retries, e)

            self._sleep(self.interval)
            if self.recovery is not None:
                self.recovery()

        # Final check is authoritative; late convergence still succeeds.
        self.attempts = self.max_retries + 1
        return self.check()
