# remindbot - Personal Reminder Bot
# Copyright (c) 2025-2026 Slash Daemon slashdaemon@protonmail.com
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, version 3 of the License.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.
#
# Commercial licensing: [slashdaemon@protonmail.com]

"""
Reminder Scheduler Module

Arms one-shot timers for accepted reminders. Each reminder gets its own
asyncio task that sleeps for the requested delay and then invokes the
delivery callback exactly once.

Pending reminders live only in memory and are lost when the process exits.
"""

import asyncio
import itertools
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Optional

logger = logging.getLogger("remindbot.reminders.scheduler")

# Delivery callback: receives the reminder text
FireCallback = Callable[[str], Awaitable[None]]
SleepFunc = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class ReminderRequest:
    """A validated reminder, ready to be scheduled."""

    text: str
    delay_ms: int
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def fire_at(self) -> datetime:
        return self.created_at + timedelta(milliseconds=self.delay_ms)


@dataclass
class PendingTimer:
    """An armed timer owned by the scheduler."""

    timer_id: int
    request: ReminderRequest
    task: Optional[asyncio.Task] = None


class ReminderScheduler:
    """
    Holds one independent timer per pending reminder.

    There is no cancellation command: once armed, a timer fires unless the
    scheduler is shut down with the rest of the bot.
    """

    def __init__(self, sleep: SleepFunc = asyncio.sleep):
        """
        Initialize the scheduler.

        Args:
            sleep: Coroutine used to wait out the delay (injectable for tests)
        """
        self._sleep = sleep
        self._pending: dict[int, PendingTimer] = {}
        self._ids = itertools.count(1)

    def schedule(self, request: ReminderRequest, on_fire: FireCallback) -> PendingTimer:
        """
        Arm a one-shot timer for a reminder.

        Must be called from within the running event loop.

        Args:
            request: Reminder with a non-negative delay and non-blank text
            on_fire: Awaited with the reminder text when the delay elapses

        Returns:
            The armed timer

        Raises:
            ValueError: If the request breaks the delay or text invariant,
                or its fire time is outside the supported date range
        """
        if request.delay_ms < 0:
            raise ValueError(f"Reminder delay must be >= 0, got {request.delay_ms}")
        if not request.text.strip():
            raise ValueError("Reminder text must not be empty")
        try:
            fire_at = request.fire_at
        except OverflowError as e:
            raise ValueError(f"Reminder delay out of range: {request.delay_ms} ms") from e

        timer = PendingTimer(timer_id=next(self._ids), request=request)
        timer.task = asyncio.create_task(self._run(timer, on_fire))
        self._pending[timer.timer_id] = timer

        logger.info(
            f"Armed timer {timer.timer_id}: fires at "
            f"{fire_at:%Y-%m-%d %H:%M:%S} ({request.delay_ms} ms)"
        )
        return timer

    async def _run(self, timer: PendingTimer, on_fire: FireCallback) -> None:
        """Wait out the delay, then deliver once."""
        try:
            await self._sleep(timer.request.delay_ms / 1000)
            await on_fire(timer.request.text)
            logger.info(f"Timer {timer.timer_id} fired")
        except asyncio.CancelledError:
            logger.info(f"Timer {timer.timer_id} cancelled before firing")
            raise
        except Exception as e:
            # No retry: a failed delivery is logged and dropped
            logger.error(f"Failed to deliver reminder {timer.timer_id}: {e}", exc_info=True)
        finally:
            self._pending.pop(timer.timer_id, None)

    def pending(self) -> list[PendingTimer]:
        """Snapshot of timers that have not fired yet."""
        return list(self._pending.values())

    async def shutdown(self) -> None:
        """Cancel all outstanding timers. Their reminders are lost."""
        timers = self.pending()
        if not timers:
            return

        logger.info(f"Cancelling {len(timers)} pending reminder(s)")
        for timer in timers:
            timer.task.cancel()
        await asyncio.gather(*(t.task for t in timers), return_exceptions=True)

        # Tasks cancelled before their first step never reach _run's cleanup
        for timer in timers:
            self._pending.pop(timer.timer_id, None)
