"""Long-running operation polling.

Fetches an operation snapshot until it reports ``done``, the retry budget or
deadline runs out, a fetch fails, or the caller cancels. ``poll`` never raises
for these outcomes; it returns a ``PollResult`` the caller can inspect or turn
into an exception with ``raise_for_status``.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol, Union

from ..exceptions import (
    APIClientError,
    OperationCancelled,
    OperationTimeout,
)
from ..models.operations import Operation

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 20
DEFAULT_INTERVAL_SECONDS = 5.0


class OperationFetcher(Protocol):
    async def get_operation(self, name: str) -> Operation: ...


ProgressCallback = Callable[[int, int, Operation], None]


class PollStatus(str, Enum):
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class PollResult:
    """Outcome of one ``OperationPoller.poll`` call.

    ``COMPLETED`` only means the operation finished; check
    ``operation.error`` for a server-side failure.
    """

    status: PollStatus
    operation_name: str
    attempts: int
    operation: Optional[Operation] = None
    error: Optional[APIClientError] = None

    @property
    def completed(self) -> bool:
        return self.status is PollStatus.COMPLETED

    @property
    def timed_out(self) -> bool:
        return self.status is PollStatus.TIMED_OUT

    def raise_for_status(self) -> Operation:
        """Return the finished operation or raise the matching error.

        Raises:
            OperationTimeout: Retry budget or deadline exhausted
            OperationCancelled: Caller cancelled polling
            APIClientError: The fetch error that ended polling
        """
        if self.status is PollStatus.COMPLETED and self.operation is not None:
            return self.operation
        if self.status is PollStatus.TIMED_OUT:
            raise OperationTimeout(self.operation_name, self.attempts)
        if self.status is PollStatus.CANCELLED:
            raise OperationCancelled(self.operation_name, self.attempts)
        if self.error is not None:
            raise self.error
        raise APIClientError(f"Polling of {self.operation_name} ended without result")


class OperationPoller:
    """Polls long-running operations through an ``OperationFetcher``."""

    def __init__(
        self,
        api_client: OperationFetcher,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        """Initialize operation poller.

        Args:
            api_client: Client exposing ``get_operation(name)``
            progress_callback: Called after every not-done snapshot with
                (attempt, max_retries, operation)
        """
        self.api_client = api_client
        self.progress_callback = progress_callback

    async def poll(
        self,
        operation_ref: Union[Operation, str],
        max_retries: int = DEFAULT_MAX_RETRIES,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        cancel_event: Optional[asyncio.Event] = None,
        deadline_seconds: Optional[float] = None,
    ) -> PollResult:
        """Poll an operation until it is done or polling has to stop.

        Args:
            operation_ref: Operation or its full resource name
            max_retries: Maximum number of fetches
            interval_seconds: Wait between fetches
            cancel_event: Set to stop polling; interrupts a pending wait
            deadline_seconds: Overall time budget, measured on the monotonic clock

        Returns:
            PollResult describing how polling ended

        Raises:
            ValueError: If ``max_retries < 1`` or ``interval_seconds < 0``
        """
        if max_retries < 1:
            raise ValueError("max_retries must be >= 1")
        if interval_seconds < 0:
            raise ValueError("interval_seconds must be >= 0")

        name = (
            operation_ref.name
            if isinstance(operation_ref, Operation)
            else operation_ref
        )
        started = time.monotonic()
        attempts = 0
        last: Optional[Operation] = None

        while True:
            if cancel_event is not None and cancel_event.is_set():
                logger.debug(f"Polling of {name} cancelled after {attempts} attempts")
                return PollResult(PollStatus.CANCELLED, name, attempts, last)

            if self._deadline_passed(started, deadline_seconds):
                logger.warning(
                    f"Deadline of {deadline_seconds}s passed polling {name} "
                    f"after {attempts} attempts"
                )
                return PollResult(PollStatus.TIMED_OUT, name, attempts, last)

            attempts += 1
            try:
                last = await self.api_client.get_operation(name)
            except APIClientError as e:
                logger.warning(f"Fetching operation {name} failed: {e}")
                return PollResult(PollStatus.FAILED, name, attempts, last, error=e)

            if last.done:
                if last.error is not None:
                    logger.debug(
                        f"Operation {name} finished with error {last.error.code}: "
                        f"{last.error.message}"
                    )
                return PollResult(PollStatus.COMPLETED, name, attempts, last)

            if attempts >= max_retries:
                logger.warning(f"Operation {name} not done after {attempts} attempts")
                return PollResult(PollStatus.TIMED_OUT, name, attempts, last)

            if self.progress_callback:
                self.progress_callback(attempts, max_retries, last)

            wait = interval_seconds
            if deadline_seconds is not None:
                remaining = deadline_seconds - (time.monotonic() - started)
                wait = max(0.0, min(wait, remaining))
            await self._wait(wait, cancel_event)

    @staticmethod
    def _deadline_passed(started: float, deadline_seconds: Optional[float]) -> bool:
        if deadline_seconds is None:
            return False
        return time.monotonic() - started >= deadline_seconds

    @staticmethod
    async def _wait(seconds: float, cancel_event: Optional[asyncio.Event]) -> None:
        """Sleep ``seconds``, returning early once ``cancel_event`` is set."""
        if cancel_event is None:
            await asyncio.sleep(seconds)
            return
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass
