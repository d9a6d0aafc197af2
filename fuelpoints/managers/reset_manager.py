"""Reset Manager - Owns the recurring daily streak reset.

One asyncio task runs an explicit loop:

    compute next fire → sleep until it (in bounded chunks) → fire → repeat

Each chunk re-reads the wall clock, so host sleep or clock adjustments shift
the wake-up to the correct instant instead of accumulating drift. There is
exactly one pending wake-up per manager and it is cancelled on shutdown.
"""

from __future__ import annotations

import asyncio
import contextlib
from typing import TYPE_CHECKING

from .. import const
from ..engines.schedule_engine import ResetSchedule, ResetScheduleEngine
from ..exceptions import FuelPointsError, ScheduleMissed
from ..utils.dt_utils import as_utc, dt_now_utc, dt_parse
from .base_manager import BaseManager

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from datetime import datetime

    from ..coordinator import ProgressionCoordinator


class ResetManager(BaseManager):
    """Manager for the timezone-anchored daily reset.

    Args:
        coordinator: Parent coordinator (provides config and the store)
        now_func: Wall clock returning an aware datetime (injectable for tests)
        sleep: Coroutine function used to wait (injectable for tests)
    """

    def __init__(
        self,
        coordinator: ProgressionCoordinator,
        *,
        now_func: Callable[[], datetime] | None = None,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        """Initialize the ResetManager."""
        super().__init__(coordinator)
        self._now = now_func or dt_now_utc
        self._sleep = sleep or asyncio.sleep
        self._task: asyncio.Task[None] | None = None
        self._schedule: ResetSchedule | None = None
        self._last_fired: datetime | None = None
        self._missed: list[ScheduleMissed] = []

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def async_setup(self) -> None:
        """Handle any missed boundary, then start the reset loop."""
        if self.running:
            const.LOGGER.debug("ResetManager: Already running")
            return

        await self._async_check_missed_boundary()
        schedule = self._compute_schedule()
        self._task = asyncio.create_task(
            self._async_run(), name=f"{__package__}.reset_loop"
        )
        const.LOGGER.info(
            "ResetManager: Started; next reset at %s (%s)",
            schedule.next_fire_instant.isoformat(),
            schedule.reference_timezone,
        )

    async def async_shutdown(self) -> None:
        """Stop the loop when the coordinator shuts down."""
        await self.async_stop()

    async def async_stop(self) -> None:
        """Cancel the pending wake-up and wait for the task to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        # A crashed loop has already logged its error.
        with contextlib.suppress(asyncio.CancelledError, Exception):
            await task
        const.LOGGER.info("ResetManager: Stopped")

    # =========================================================================
    # State
    # =========================================================================

    @property
    def running(self) -> bool:
        """True while the loop task is alive."""
        return self._task is not None and not self._task.done()

    @property
    def schedule(self) -> ResetSchedule | None:
        """Snapshot of the pending reset, or None before setup."""
        return self._schedule

    @property
    def last_fired(self) -> datetime | None:
        """Boundary most recently fired by this process."""
        return self._last_fired

    @property
    def missed_boundaries(self) -> list[ScheduleMissed]:
        """Boundaries found missed at startup (compensated or not)."""
        return list(self._missed)

    # =========================================================================
    # Loop
    # =========================================================================

    def _compute_schedule(self) -> ResetSchedule:
        tz = self.config.reference_timezone
        fire_at = ResetScheduleEngine.next_fire_after(
            tz, self._now(), self._last_fired, self.config.reset_safety_margin
        )
        self._schedule = ResetSchedule(
            reference_timezone=str(tz), next_fire_instant=fire_at
        )
        return self._schedule

    async def _async_run(self) -> None:
        try:
            while True:
                fire_at = self._compute_schedule().next_fire_instant
                await self._async_sleep_until(fire_at)
                await self._async_fire(fire_at)
        except Exception:
            const.LOGGER.exception("ResetManager: Reset loop stopped unexpectedly")
            raise

    async def _async_sleep_until(self, fire_at: datetime) -> None:
        """Sleep in chunks, re-reading the wall clock after each one."""
        while True:
            remaining = (fire_at - as_utc(self._now())).total_seconds()
            if remaining <= 0:
                return
            await self._sleep(min(remaining, self.config.reset_max_sleep_seconds))

    async def _async_fire(self, boundary: datetime, *, catch_up: bool = False) -> bool:
        """Run the store reset for one boundary. Never retried, never raises.

        The boundary is marked fired before the call so a failure or timeout
        still moves the loop on to the next day.
        """
        self._last_fired = boundary
        const.LOGGER.debug(
            "ResetManager: Firing reset for boundary %s%s",
            boundary.isoformat(),
            " (catch-up)" if catch_up else "",
        )
        try:
            await self._async_call_external(
                "async_reset_streaks", self.coordinator.store.async_reset_streaks()
            )
        except FuelPointsError as err:
            const.LOGGER.error(
                "ResetManager: Reset for boundary %s failed: %s",
                boundary.isoformat(),
                err,
            )
            self.emit(
                const.SIGNAL_RESET_FAILED,
                boundary=boundary.isoformat(),
                catch_up=catch_up,
            )
            return False
        except Exception:
            const.LOGGER.exception(
                "ResetManager: Unexpected error during reset for boundary %s",
                boundary.isoformat(),
            )
            self.emit(
                const.SIGNAL_RESET_FAILED,
                boundary=boundary.isoformat(),
                catch_up=catch_up,
            )
            return False

        const.LOGGER.info(
            "ResetManager: Streak reset completed for boundary %s", boundary.isoformat()
        )
        self.emit(
            const.SIGNAL_RESET_COMPLETED,
            boundary=boundary.isoformat(),
            catch_up=catch_up,
        )
        return True

    # =========================================================================
    # Startup catch-up
    # =========================================================================

    async def _async_check_missed_boundary(self) -> ScheduleMissed | None:
        """Detect a boundary that elapsed while the process was down.

        Requires a store exposing async_get_last_reset(). With
        catch_up_missed_reset enabled the boundary is fired once now;
        otherwise it is only logged and recorded.
        """
        get_last_reset = getattr(self.coordinator.store, "async_get_last_reset", None)
        if get_last_reset is None:
            return None

        try:
            raw_last_reset = await self._async_call_external(
                "async_get_last_reset", get_last_reset()
            )
        except FuelPointsError as err:
            const.LOGGER.warning(
                "ResetManager: Could not read last reset, skipping catch-up: %s", err
            )
            return None

        # Persisted stores may hand back an ISO string or a date.
        last_reset = dt_parse(raw_last_reset, self.config.reference_timezone)
        boundary = ResetScheduleEngine.missed_boundary(
            self.config.reference_timezone,
            self._now(),
            last_reset,
            self.config.reset_safety_margin,
        )
        if boundary is None:
            const.LOGGER.debug(
                "ResetManager: Startup catch-up not needed (last_reset=%s)",
                last_reset.isoformat() if last_reset else "missing",
            )
            return None

        if self.config.catch_up_missed_reset:
            const.LOGGER.info(
                "ResetManager: Startup catch-up triggered "
                "(last_reset=%s, boundary=%s)",
                last_reset.isoformat(),
                boundary.isoformat(),
            )
            compensated = await self._async_fire(boundary, catch_up=True)
        else:
            const.LOGGER.warning(
                "ResetManager: Missed reset boundary %s (last_reset=%s); "
                "catch-up disabled",
                boundary.isoformat(),
                last_reset.isoformat(),
            )
            compensated = False

        record = ScheduleMissed(
            boundary=boundary, last_reset=last_reset, compensated=compensated
        )
        self._missed.append(record)
        self.emit(
            const.SIGNAL_RESET_MISSED,
            boundary=boundary.isoformat(),
            compensated=compensated,
        )
        return record
