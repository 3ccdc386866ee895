"""Completion polling for asynchronous remote operations.

When an API accepts an operation but completes it in the background, the
resource is re-read until its status reaches one of the target statuses. The
poller is an explicit state machine driven by a blocking loop:

    PENDING --tick--> PENDING   status not yet in the target set
    PENDING --tick--> TARGET    status in the target set (success)
    PENDING --tick--> ERROR     refresh or status extraction failed
    PENDING --------> TIMEOUT   timeout expired before reaching a target

Pending statuses are advisory: a status outside both sets keeps the poller in
PENDING rather than failing it.

Example:
    >>> poller = CompletionPoller(
    ...     resource_name="cdn",
    ...     refresh=refresh_cdn,
    ...     pending_statuses=["pending"],
    ...     target_statuses=["deployed"],
    ...     timeout=600,
    ... )
    >>> payload = poller.run()
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from enum import Enum
from typing import Any

from apiresource.errors import PollingTimeoutError, StatusFieldResolutionError

logger = logging.getLogger(__name__)

RefreshFunc = Callable[[], tuple[dict[str, Any] | None, str]]


class PollState(Enum):
    """States of the completion polling state machine."""

    PENDING = "pending"
    TARGET = "target"
    ERROR = "error"
    TIMEOUT = "timeout"

    @property
    def is_terminal(self) -> bool:
        return self != PollState.PENDING


def extract_status(payload: dict[str, Any], status_path: Sequence[str]) -> str:
    """Walk ``status_path`` (wire names) through ``payload`` to the status value.

    Raises:
        StatusFieldResolutionError: If the path does not lead to a string value.
    """
    value: Any = payload
    for name in status_path:
        if not isinstance(value, dict) or name not in value:
            raise StatusFieldResolutionError(
                f"payload does not match resource schema, could not find the status field: "
                f"{list(status_path)}"
            )
        value = value[name]
    if not isinstance(value, str):
        raise StatusFieldResolutionError(
            f"invalid status value '{value}' received, the status should be a string"
        )
    return value


class CompletionPoller:
    """Re-reads a resource until it reaches a target status.

    Attributes:
        state: Current PollState.
        reads: Number of refresh calls performed so far.
        last_status: Status observed on the latest refresh.
        last_payload: Payload observed on the latest refresh.
        last_error: Error that moved the poller to ERROR, if any.
    """

    def __init__(
        self,
        resource_name: str,
        refresh: RefreshFunc,
        pending_statuses: Sequence[str],
        target_statuses: Sequence[str],
        timeout: float,
        poll_interval: float = 5.0,
        initial_delay: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.resource_name = resource_name
        self.refresh = refresh
        self.pending_statuses = list(pending_statuses)
        self.target_statuses = list(target_statuses)
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.initial_delay = initial_delay
        self._clock = clock
        self._sleep = sleep

        self.state = PollState.PENDING
        self.reads = 0
        self.last_status: str | None = None
        self.last_payload: dict[str, Any] | None = None
        self.last_error: Exception | None = None

    def tick(self) -> PollState:
        """Perform one refresh and advance the state machine."""
        if self.state.is_terminal:
            return self.state

        self.reads += 1
        try:
            payload, status = self.refresh()
        except Exception as e:
            self.last_error = e
            self.state = PollState.ERROR
            raise

        self.last_payload = payload
        self.last_status = status
        logger.debug(f"resource '{self.resource_name}' status: {status}")

        if status in self.target_statuses:
            self.state = PollState.TARGET
        elif status not in self.pending_statuses:
            logger.debug(
                f"resource '{self.resource_name}' status '{status}' is not a declared pending "
                f"status {self.pending_statuses}, still waiting"
            )
        return self.state

    def run(self) -> dict[str, Any] | None:
        """Block until a target status is reached and return the latest payload.

        Raises:
            PollingTimeoutError: If the timeout expires first.
            StatusFieldResolutionError: If the status can not be extracted.
            Exception: Any error raised by the refresh function, unchanged.
        """
        logger.info(
            f"Waiting for resource '{self.resource_name}' to reach a completion status "
            f"{self.target_statuses}"
        )
        deadline = self._clock() + self.timeout
        if self.initial_delay > 0:
            self._sleep(min(self.initial_delay, self.timeout))

        while True:
            if self.tick() == PollState.TARGET:
                logger.info(
                    f"Resource '{self.resource_name}' reached status '{self.last_status}' "
                    f"after {self.reads} reads"
                )
                return self.last_payload

            remaining = deadline - self._clock()
            if remaining <= 0:
                self.state = PollState.TIMEOUT
                raise PollingTimeoutError(
                    self.resource_name,
                    timeout=self.timeout,
                    pending_statuses=self.pending_statuses,
                    target_statuses=self.target_statuses,
                    last_status=self.last_status,
                )
            self._sleep(min(self.poll_interval, remaining))
