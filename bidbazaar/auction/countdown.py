"""
Shared showcase/preview countdown.

Only one countdown exists per process. Starting a new one always preempts
the running one. The ticker is an asyncio task owned by the Countdown, and
its sleep function is injectable so tests can run it without waiting.
"""

import asyncio
import contextlib
import logging
from typing import Any, Awaitable, Callable, Optional

from .auction_state import AuctionState, CountdownState
from .errors import InvalidAmountError
from .standings_calculator import build_preview_catalog

logger = logging.getLogger(__name__)

COUNTDOWN_KINDS = ('showcase', 'preview')

EmitFn = Callable[[str, Any], Awaitable[None]]
SleepFn = Callable[[float], Awaitable[None]]


class Countdown:
    """Runs the single countdown and reports each tick through emit."""

    def __init__(
        self,
        state: AuctionState,
        emit: EmitFn,
        sleep: SleepFn = asyncio.sleep,
        tick_seconds: float = 1.0
    ):
        """
        Initialize the countdown.

        Args:
            state: Owned auction state; its countdown field is kept current
            emit: Coroutine called as emit(event_name, payload)
            sleep: Coroutine used to wait between ticks
            tick_seconds: Seconds between ticks
        """
        self.state = state
        self._emit = emit
        self._sleep = sleep
        self.tick_seconds = tick_seconds
        self._task: Optional[asyncio.Task] = None
        # Created on first use so it belongs to the running loop
        self._lock: Optional[asyncio.Lock] = None

    def _get_lock(self) -> asyncio.Lock:
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self, kind: str, duration: int) -> CountdownState:
        """
        Start (or restart) the countdown from full.

        Emits '<kind>Started' immediately, then '<kind>TimerUpdate' once per
        tick with the remaining seconds, then '<kind>Ended' at zero.
        Concurrent calls are serialized, so at most one ticker ever runs.

        Args:
            kind: 'showcase' or 'preview'
            duration: Length in seconds

        Returns:
            The new CountdownState

        Raises:
            ValueError: If kind is unknown
            InvalidAmountError: If duration is not positive
        """
        if kind not in COUNTDOWN_KINDS:
            raise ValueError(f"Unknown countdown kind: {kind}")
        if duration <= 0:
            raise InvalidAmountError(f"Countdown duration must be positive: {duration}")

        async with self._get_lock():
            return await self._start(kind, duration)

    async def _start(self, kind: str, duration: int) -> CountdownState:
        previous_kind = self.state.countdown.kind if self.is_running else None
        await self._cancel_task()

        if previous_kind and previous_kind != kind:
            logger.info(f"{kind} countdown preempts running {previous_kind}")
            await self._emit(f"{previous_kind}Ended", None)

        self.state.countdown = CountdownState(
            kind=kind,
            is_active=True,
            duration=duration,
            timer=duration
        )

        if kind == 'preview':
            started_payload = {
                'previewState': self.state.countdown.to_dict(),
                'products': build_preview_catalog(self.state)
            }
        else:
            started_payload = self.state.countdown.to_dict()

        await self._emit(f"{kind}Started", started_payload)

        self._task = asyncio.create_task(self._run(kind))
        logger.info(f"Started {kind} countdown: {duration}s")

        return self.state.countdown

    async def cancel(self) -> None:
        """Stop the ticker without emitting an ended event."""
        async with self._get_lock():
            await self._cancel_task()

    async def _cancel_task(self) -> None:
        task = self._task
        self._task = None

        if task is None or task.done():
            return

        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

        self.state.countdown.is_active = False
        logger.debug("Countdown cancelled")

    async def wait(self) -> None:
        """Wait for the running countdown to finish."""
        if self._task is not None:
            await self._task

    async def _run(self, kind: str) -> None:
        countdown = self.state.countdown

        while countdown.timer > 0:
            await self._sleep(self.tick_seconds)
            countdown.timer -= 1
            logger.debug(f"{kind} countdown: {countdown.timer}s")
            await self._emit(f"{kind}TimerUpdate", countdown.timer)

        self.state.countdown = CountdownState(kind=kind)
        await self._emit(f"{kind}Ended", None)

        logger.info(f"{kind} countdown ended")
