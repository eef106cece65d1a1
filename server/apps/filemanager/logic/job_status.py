"""Status of a long-running file manager job.

Tracks nested progress and lets the job ask the user a question while
it runs. Another thread answers or interrupts the question.
"""

import enum
import logging
import secrets
import threading
from collections.abc import Callable, Iterator
from concurrent.futures import CancelledError, Future
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from server.apps.filemanager.exceptions import InteractionInterruptedError

if TYPE_CHECKING:
    from server.apps.filemanager.logic.conflicts import (
        OverwriteDecision,
        OverwriteQuestion,
    )
    from server.apps.filemanager.logic.ports import JobPort

logger = logging.getLogger(__name__)

# Job ID length in bytes (generates 16 hex chars)
_JOB_ID_BYTES: Final = 8


class JobState(enum.StrEnum):
    """Lifecycle of a job."""

    NONE = 'none'
    RUNNING = 'running'
    WAITING = 'waiting'
    FINISHED = 'finished'


@dataclass(slots=True)
class ProgressLevel:
    """One frame of the progress stack."""

    total_steps: int
    completed_steps: int = 0


class JobStatus:
    """Progress and question channel of one job."""

    def __init__(self, job_id: str | None = None) -> None:
        """Initialize job status.

        Args:
            job_id: Job identifier, a random one is generated if omitted.
        """
        self.job_id = job_id or secrets.token_hex(_JOB_ID_BYTES)
        self.state = JobState.NONE
        self._levels: list[ProgressLevel] = []
        self._lock = threading.Lock()
        self._cancelled = threading.Event()
        self._question: OverwriteQuestion | None = None
        self._answer: Future[OverwriteDecision] | None = None

    @property
    def is_cancelled(self) -> bool:
        """Check if the job was asked to stop."""
        return self._cancelled.is_set()

    @property
    def question(self) -> 'OverwriteQuestion | None':
        """Question currently waiting for an answer, if any."""
        return self._question

    @property
    def depth(self) -> int:
        """Number of progress levels currently open."""
        return len(self._levels)

    @property
    def progress(self) -> float:
        """Overall completion between 0 and 1.

        Each open level splits one step of its parent level into its
        own steps, so nested work moves the overall value smoothly.
        """
        offset = 0.0
        span = 1.0
        for level in self._levels:
            if level.total_steps <= 0:
                break
            span /= level.total_steps
            offset += span * level.completed_steps
        return min(offset, 1.0)

    def start(self) -> None:
        """Mark the job as running."""
        self.state = JobState.RUNNING

    def finish(self) -> None:
        """Mark the job as finished."""
        self.state = JobState.FINISHED

    def push_level_progress(self, total_steps: int) -> None:
        """Enter a sub-operation made of ``total_steps`` steps.

        Args:
            total_steps: Number of steps of the sub-operation.
        """
        self._levels.append(ProgressLevel(total_steps=total_steps))

    def step_progress(self) -> None:
        """Mark one step of the innermost sub-operation as done."""
        if not self._levels:
            logger.warning('Job %s: progress step outside any level', self.job_id)
            return
        level = self._levels[-1]
        if level.completed_steps >= level.total_steps:
            logger.warning(
                'Job %s: progress level already complete (%d steps)',
                self.job_id,
                level.total_steps,
            )
            return
        level.completed_steps += 1

    def pop_level_progress(self) -> None:
        """Leave the innermost sub-operation."""
        if not self._levels:
            logger.warning('Job %s: no progress level to pop', self.job_id)
            return
        self._levels.pop()

    def ask(self, question: 'OverwriteQuestion') -> 'OverwriteDecision':
        """Block until the question is answered or interrupted.

        Args:
            question: Question shown to the user.

        Returns:
            Decision given with ``answer_question``.

        Raises:
            InteractionInterruptedError: If the job is cancelled or the
                question is interrupted before an answer arrives.
        """
        answer: Future[OverwriteDecision] = Future()
        with self._lock:
            if self.is_cancelled:
                raise InteractionInterruptedError(
                    f'Job {self.job_id} is cancelled',
                )
            previous_state = self.state
            self.state = JobState.WAITING
            self._answer = answer
            self._question = question

        logger.info(
            'Job %s waiting for an answer: overwrite [%s] with [%s]?',
            self.job_id,
            question.destination_identifier,
            question.source_identifier,
        )
        try:
            return answer.result()
        except CancelledError as exc:
            raise InteractionInterruptedError(
                f'Job {self.job_id}: question was interrupted',
            ) from exc
        finally:
            with self._lock:
                self._question = None
                self._answer = None
                self.state = previous_state

    def answer_question(self, decision: 'OverwriteDecision') -> bool:
        """Answer the pending question.

        Args:
            decision: Answer to hand to the waiting job.

        Returns:
            True if a question was waiting, False otherwise.
        """
        with self._lock:
            answer = self._answer
            if answer is None or answer.running() or answer.done():
                logger.warning('Job %s: no question to answer', self.job_id)
                return False
            answer.set_running_or_notify_cancel()
            answer.set_result(decision)
        return True

    def interrupt_question(self) -> bool:
        """Stop waiting for the pending question.

        Returns:
            True if a waiting question was interrupted, False otherwise.
        """
        with self._lock:
            answer = self._answer
            return answer is not None and answer.cancel()

    def cancel(self) -> None:
        """Ask the job to stop and interrupt any pending question."""
        with self._lock:
            self._cancelled.set()
        self.interrupt_question()
        logger.info('Job %s cancelled', self.job_id)


@contextmanager
def progress_level(
    job: 'JobPort | None',
    total_steps: int,
) -> Iterator[Callable[[], None]]:
    """Open a progress level that is closed on every exit path.

    Args:
        job: Job to report to, nothing is reported if None.
        total_steps: Number of steps of the level.

    Yields:
        Function that marks one step as done.
    """
    if job is None:
        yield _skip_step
        return

    job.push_level_progress(total_steps)
    try:
        yield job.step_progress
    finally:
        job.pop_level_progress()


def _skip_step() -> None:
    """Step function used when there is no job to report to."""
