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
Chat Command Dispatcher

Matches messages from the monitored channel against the literal commands
`!ping`, `!remind` and `!help`, and hands accepted reminders to the scheduler.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional, Protocol

from config import BotConfig
from reminders import (
    EmptyTextError,
    FormatError,
    ParseStatus,
    PastDateError,
    ReminderError,
    ReminderRequest,
    ReminderScheduler,
    UsageError,
    is_time_token,
    parse_absolute,
    parse_relative,
    resolve_fire_time,
)

logger = logging.getLogger("remindbot.commands.dispatcher")

COMMAND_PREFIX = "!"

PING_REPLY = "pong! 🏓"

HELP_TEXT = (
    "🤖 *Personal Bot Commands*\n\n"
    "!ping - Test if bot is working\n\n"
    "!remind - Set a reminder\n"
    "  *Relative time:*\n"
    "  !remind 30s test\n"
    "  !remind 5m drink water\n"
    "  !remind 2h meeting prep\n"
    "  !remind 1d call mom\n\n"
    "  *Absolute date/time:*\n"
    "  !remind 25-12-2024 10:30 Christmas party\n"
    "  !remind 25/12/2024 14:00 event\n"
    "  !remind 31-12-2024 New Year (defaults 9 AM)\n\n"
    "!help - Show this message"
)


@dataclass(frozen=True)
class InboundMessage:
    """A message observed on the channel, as delivered by the gateway."""

    sender_id: str
    body: str
    context: Any = None  # Gateway-specific handle used for replies


class ChannelGateway(Protocol):
    """Outbound side of the messaging network."""

    async def reply(self, context: Any, text: str) -> None: ...

    async def send_message(self, destination_id: str, text: str) -> None: ...


def format_reminder(text: str) -> str:
    """Text delivered when a reminder fires."""
    return f"⏰ REMINDER: {text}"


class CommandDispatcher:
    """
    Routes inbound messages to command handlers.

    Only messages whose sender is the configured channel are acted on; the
    bot's own messages on that channel are not special-cased.
    """

    def __init__(
        self,
        config: BotConfig,
        scheduler: ReminderScheduler,
        gateway: ChannelGateway,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.config = config
        self.scheduler = scheduler
        self.gateway = gateway
        self._clock = clock

    async def handle(self, message: InboundMessage) -> None:
        """Handle one inbound message."""
        if message.sender_id != self.config.channel_id:
            return

        body = message.body
        logger.debug(f"Body: {body!r}")

        if not body.startswith(COMMAND_PREFIX):
            return

        logger.info(f"Processing command: {body}")

        if body == "!ping":
            await self.gateway.reply(message.context, PING_REPLY)
        elif body.startswith("!remind"):
            await self._handle_remind(message)
        elif body == "!help":
            await self.gateway.reply(message.context, HELP_TEXT)
        # Unknown commands are ignored without a reply

    async def _handle_remind(self, message: InboundMessage) -> None:
        """Parse `!remind <time> [time2] <text>` and arm a timer."""
        now = self._clock()
        try:
            delay_ms, text, description = self._parse_remind(message.body, now)
        except ReminderError as e:
            logger.info(f"Rejected reminder ({type(e).__name__}): {e}")
            await self.gateway.reply(message.context, e.reply_text)
            return

        await self.gateway.reply(
            message.context, f'✅ Reminder set for {description}: "{text}"'
        )

        request = ReminderRequest(text=text, delay_ms=delay_ms, created_at=now)
        self.scheduler.schedule(request, self._deliver)
        logger.info(
            f"Reminder scheduled: {text} at {request.fire_at:%Y-%m-%d %H:%M:%S}"
        )

    def _parse_remind(self, body: str, now: datetime) -> tuple[int, str, str]:
        """
        Extract delay, reminder text and echoed description from a command.

        Returns:
            Tuple of (delay_ms, reminder_text, time_description)

        Raises:
            UsageError: Fewer than two arguments
            FormatError: Unparseable time or date, or a delay out of range
            PastDateError: Date already elapsed
            EmptyTextError: Blank reminder text
        """
        # Single-space split keeps empty tokens, matching the usage count
        parts = body.split(" ")
        if len(parts) < 3:
            raise UsageError()

        delay_ms: Optional[int] = parse_relative(parts[1])
        if delay_ms is not None:
            text = " ".join(parts[2:])
            description = parts[1]
            # Huge relative values are well-formed but cannot be scheduled
            resolve_fire_time(now, delay_ms)
        else:
            if is_time_token(parts[2]):
                outcome = parse_absolute(parts[1], parts[2], now=now)
                text = " ".join(parts[3:])
                description = f"{parts[1]} {parts[2]}"
            else:
                outcome = parse_absolute(parts[1], now=now)
                text = " ".join(parts[2:])
                description = f"{parts[1]} at 9:00 AM"

            if outcome.status is ParseStatus.INVALID:
                raise FormatError(f"Unparseable time: {description}")
            if outcome.status is ParseStatus.IN_THE_PAST:
                raise PastDateError(f"Time in the past: {description}")
            delay_ms = outcome.delay_ms

        if not text.strip():
            raise EmptyTextError()

        return delay_ms, text, description

    async def _deliver(self, text: str) -> None:
        """Send a fired reminder to the configured destination."""
        await self.gateway.send_message(self.config.destination_id, format_reminder(text))
        logger.info(f"Sent reminder to {self.config.destination_id}")
