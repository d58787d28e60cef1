"""
Fixed-interval status polling.

Long running VPC operations report progress through a status field. The
poller refreshes that status until it reaches a target state, the timeout is
used up, or the caller cancels through an ``asyncio.Event``.
"""

import asyncio
import logging
from typing import Any, Callable, Iterable, Optional, Tuple

from ..errors import PollCancelledError, PollTimeoutError, UnexpectedStateError

logger = logging.getLogger(__name__)

StatusRefresh = Callable[[], Tuple[Any, str]]


async def _pause(seconds: float, cancel_event: Optional[asyncio.Event]) -> None:
    """Sleep for ``seconds``, waking early when the cancel event is set."""
    if seconds <= 0:
        return
    if cancel_event is None:
        await asyncio.sleep(seconds)
        return
    try:
        await asyncio.wait_for(cancel_event.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        pass


async def wait_for_state(
    refresh: StatusRefresh,
    pending: Iterable[str],
    target: Iterable[str],
    timeout: float,
    interval: float = 10.0,
    delay: float = 0.0,
    observer: Optional[Callable[[str], None]] = None,
    cancel_event: Optional[asyncio.Event] = None,
) -> Tuple[Any, str]:
    """
    Poll ``refresh`` until it reports one of the target states.

    Args:
        refresh: Callable returning ``(result, status)``; may also return an
            awaitable of that tuple. Errors it raises propagate unchanged.
        pending: States that mean "keep waiting"
        target: Terminal states
        timeout: Maximum seconds to wait, measured on the event loop clock
            and including the time spent in ``refresh``
        interval: Seconds between refreshes
        delay: Seconds to wait before the first refresh
        observer: Called with every observed state
        cancel_event: When set, polling stops with PollCancelledError

    Returns:
        The ``(result, status)`` pair of the first target state

    Raises:
        PollTimeoutError: No target state within ``timeout``
        UnexpectedStateError: A state that is neither pending nor target
        PollCancelledError: ``cancel_event`` was set
    """
    pending_states = set(pending)
    target_states = set(target)
    loop = asyncio.get_running_loop()
    started = loop.time()
    slept = 0.0
    last_status: Optional[str] = None

    def elapsed() -> float:
        # Wall clock, or the requested sleeps when those did not really pass
        return max(loop.time() - started, slept)

    if delay > 0:
        await _pause(delay, cancel_event)
        slept += delay

    while True:
        if cancel_event is not None and cancel_event.is_set():
            raise PollCancelledError(
                f"Polling cancelled after {elapsed():.0f}s (last state: {last_status!r})",
                step="poll",
            )

        outcome = refresh()
        if hasattr(outcome, "__await__"):
            outcome = await outcome
        result, status = outcome
        last_status = status

        if observer is not None:
            observer(status)

        logger.debug(
            "Polled state",
            extra={"status": status, "elapsed_seconds": elapsed()},
        )

        if status in target_states:
            return result, status

        if status not in pending_states:
            raise UnexpectedStateError(
                f"Unexpected state {status!r}, wanted target {sorted(target_states)!r}",
                status=status,
                step="poll",
            )

        if elapsed() >= timeout:
            raise PollTimeoutError(
                f"Timeout while waiting for state to become {sorted(target_states)!r} "
                f"(last state: {status!r}, timeout: {timeout:.0f}s)",
                last_status=status,
                step="poll",
            )

        # Never sleep past the deadline
        pause = min(interval, timeout - elapsed())
        await _pause(pause, cancel_event)
        slept += pause
