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

"""Tests for chat command dispatching."""

import asyncio
import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from commands.dispatcher import (
    HELP_TEXT,
    PING_REPLY,
    CommandDispatcher,
    InboundMessage,
)
from config import BotConfig
from reminders.errors import EmptyTextError, FormatError, PastDateError, UsageError
from reminders.scheduler import ReminderScheduler

CHANNEL_ID = "111"
DESTINATION_ID = "222"
NOW = datetime(2024, 6, 1, 12, 0)


class FakeGateway:
    """Records replies and outbound sends."""

    def __init__(self, fail_sends: bool = False):
        self.replies = []
        self.sent = []
        self.fail_sends = fail_sends

    async def reply(self, context, text):
        self.replies.append((context, text))

    async def send_message(self, destination_id, text):
        if self.fail_sends:
            raise ConnectionError("send failed")
        self.sent.append((destination_id, text))


class FakeSleep:
    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def sleep():
    return FakeSleep()


@pytest.fixture
def scheduler(sleep):
    return ReminderScheduler(sleep=sleep)


@pytest.fixture
def dispatcher(gateway, scheduler):
    config = BotConfig(
        discord_token="token",
        channel_id=CHANNEL_ID,
        destination_id=DESTINATION_ID,
    )
    return CommandDispatcher(config, scheduler, gateway, clock=lambda: NOW)


def message(body, sender_id=CHANNEL_ID):
    return InboundMessage(sender_id=sender_id, body=body, context="ctx")


async def fire_all(scheduler):
    await asyncio.gather(*(t.task for t in scheduler.pending()))


class TestFiltering:
    """Test authorization and prefix checks."""

    @pytest.mark.asyncio
    async def test_other_sender_ignored(self, dispatcher, gateway, scheduler):
        for body in ("!ping", "!help", "!remind 5m water"):
            await dispatcher.handle(message(body, sender_id="999"))
        assert gateway.replies == []
        assert scheduler.pending() == []

    @pytest.mark.asyncio
    async def test_non_command_ignored(self, dispatcher, gateway):
        await dispatcher.handle(message("ping"))
        await dispatcher.handle(message("remind 5m water"))
        assert gateway.replies == []

    @pytest.mark.asyncio
    async def test_unknown_command_silent(self, dispatcher, gateway):
        await dispatcher.handle(message("!weather"))
        await dispatcher.handle(message("!"))
        assert gateway.replies == []

    @pytest.mark.asyncio
    async def test_bot_replies_not_reprocessed(self, dispatcher, gateway):
        await dispatcher.handle(message(PING_REPLY))
        await dispatcher.handle(message(UsageError.reply_text))
        assert gateway.replies == []


class TestSimpleCommands:
    @pytest.mark.asyncio
    async def test_ping(self, dispatcher, gateway):
        await dispatcher.handle(message("!ping"))
        assert gateway.replies == [("ctx", PING_REPLY)]

    @pytest.mark.asyncio
    async def test_ping_is_exact_match(self, dispatcher, gateway):
        await dispatcher.handle(message("!ping now"))
        assert gateway.replies == []

    @pytest.mark.asyncio
    async def test_help(self, dispatcher, gateway):
        await dispatcher.handle(message("!help"))
        assert gateway.replies == [("ctx", HELP_TEXT)]
        assert "!remind" in HELP_TEXT


class TestRemindRelative:
    """Test relative-time reminders end to end."""

    @pytest.mark.asyncio
    async def test_remind_minutes(self, dispatcher, gateway, scheduler, sleep):
        await dispatcher.handle(message("!remind 5m water"))

        assert len(gateway.replies) == 1
        reply = gateway.replies[0][1]
        assert "5m" in reply
        assert "water" in reply
        assert reply == '✅ Reminder set for 5m: "water"'

        pending = scheduler.pending()
        assert len(pending) == 1
        assert pending[0].request.delay_ms == 300_000
        assert pending[0].request.text == "water"
        assert gateway.sent == []

        await fire_all(scheduler)

        assert sleep.calls == [300.0]
        assert gateway.sent == [(DESTINATION_ID, "⏰ REMINDER: water")]
        assert scheduler.pending() == []

    @pytest.mark.asyncio
    async def test_multi_word_text(self, dispatcher, gateway, scheduler):
        await dispatcher.handle(message("!remind 2h meeting prep now"))
        assert scheduler.pending()[0].request.text == "meeting prep now"
        assert scheduler.pending()[0].request.delay_ms == 7_200_000

    @pytest.mark.asyncio
    async def test_zero_delay_uses_relative_branch(self, dispatcher, gateway, scheduler):
        await dispatcher.handle(message("!remind 0s stretch"))

        assert gateway.replies == [("ctx", '✅ Reminder set for 0s: "stretch"')]
        pending = scheduler.pending()
        assert len(pending) == 1
        assert pending[0].request.delay_ms == 0

        await fire_all(scheduler)
        assert gateway.sent == [(DESTINATION_ID, "⏰ REMINDER: stretch")]


class TestRemindAbsolute:
    """Test absolute date reminders."""

    @pytest.mark.asyncio
    async def test_date_and_time(self, dispatcher, gateway, scheduler):
        await dispatcher.handle(message("!remind 25-12-2024 10:30 party"))

        assert gateway.replies == [("ctx", '✅ Reminder set for 25-12-2024 10:30: "party"')]
        request = scheduler.pending()[0].request
        assert request.text == "party"
        assert request.fire_at == datetime(2024, 12, 25, 10, 30)
        assert request.delay_ms == (datetime(2024, 12, 25, 10, 30) - NOW) // timedelta(milliseconds=1)

    @pytest.mark.asyncio
    async def test_slash_date(self, dispatcher, scheduler):
        await dispatcher.handle(message("!remind 25/12/2024 14:00 event"))
        assert scheduler.pending()[0].request.fire_at == datetime(2024, 12, 25, 14, 0)

    @pytest.mark.asyncio
    async def test_date_only_defaults_to_nine(self, dispatcher, gateway, scheduler):
        await dispatcher.handle(message("!remind 31-12-2024 New Year"))

        assert gateway.replies == [("ctx", '✅ Reminder set for 31-12-2024 at 9:00 AM: "New Year"')]
        request = scheduler.pending()[0].request
        assert request.text == "New Year"
        assert request.fire_at == datetime(2024, 12, 31, 9, 0)

    @pytest.mark.asyncio
    async def test_ymd_date(self, dispatcher, scheduler):
        await dispatcher.handle(message("!remind 2024-12-25 10:30 party"))
        assert scheduler.pending()[0].request.fire_at == datetime(2024, 12, 25, 10, 30)


class TestRemindErrors:
    """Each rejected request gets its own reply and arms nothing."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", ["!remind", "!remind 5m"])
    async def test_usage(self, dispatcher, gateway, scheduler, body):
        await dispatcher.handle(message(body))
        assert gateway.replies == [("ctx", UsageError.reply_text)]
        assert scheduler.pending() == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", ["!remind 5m ", "!remind 5m   ", "!remind 25-12-2024 10:30"])
    async def test_empty_text(self, dispatcher, gateway, scheduler, body):
        await dispatcher.handle(message(body))
        assert gateway.replies == [("ctx", EmptyTextError.reply_text)]
        assert scheduler.pending() == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            "!remind tomorrow lunch",
            "!remind 31-02-2024 party",
            "!remind 25-12-2024 25:00 party",
            "!remind 5x water",
        ],
    )
    async def test_invalid_format(self, dispatcher, gateway, scheduler, body):
        await dispatcher.handle(message(body))
        assert gateway.replies == [("ctx", FormatError.reply_text)]
        assert scheduler.pending() == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            "!remind 10000000d far future",
            "!remind 9999999999999d far future",
            "!remind " + "9" * 5000 + "s far future",
        ],
    )
    async def test_delay_out_of_range(self, dispatcher, gateway, scheduler, body):
        await dispatcher.handle(message(body))
        assert gateway.replies == [("ctx", FormatError.reply_text)]
        assert scheduler.pending() == []

    @pytest.mark.asyncio
    async def test_long_delay_within_range(self, dispatcher, gateway, scheduler):
        await dispatcher.handle(message("!remind 36500d centennial"))
        assert gateway.replies == [("ctx", '✅ Reminder set for 36500d: "centennial"')]
        assert scheduler.pending()[0].request.delay_ms == 36500 * 86_400_000

    @pytest.mark.asyncio
    async def test_past_date(self, dispatcher, gateway, scheduler):
        await dispatcher.handle(message("!remind 01-01-2024 10:00 old news"))
        assert gateway.replies == [("ctx", PastDateError.reply_text)]
        assert scheduler.pending() == []

    @pytest.mark.asyncio
    async def test_past_date_checked_before_empty_text(self, dispatcher, gateway):
        await dispatcher.handle(message("!remind 01-01-2024 10:00 "))
        assert gateway.replies == [("ctx", PastDateError.reply_text)]


class TestDeliveryFailure:
    @pytest.mark.asyncio
    async def test_failed_send_is_dropped(self, scheduler):
        gateway = FakeGateway(fail_sends=True)
        config = BotConfig("token", CHANNEL_ID, DESTINATION_ID)
        dispatcher = CommandDispatcher(config, scheduler, gateway, clock=lambda: NOW)

        await dispatcher.handle(message("!remind 1s water"))
        await fire_all(scheduler)

        assert gateway.sent == []
        assert scheduler.pending() == []
