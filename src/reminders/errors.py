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
Reminder Errors

Expected user-input failures for `!remind`. Each carries the chat reply
shown to the user; none of them indicates a bug.
"""

USAGE_TEXT = (
    "❌ Usage:\n"
    "*Relative time:* !remind 5m message\n"
    "*Absolute time:* !remind 25-12-2024 10:30 message\n"
    "*Just date:* !remind 25-12-2024 message (defaults to 9 AM)\n\n"
    "Time units: s, m, h, d\n"
    "Date formats: DD-MM-YYYY or DD/MM/YYYY"
)


class ReminderError(Exception):
    """Base class for reminder request errors."""

    reply_text = "❌ Could not set reminder."

    def __init__(self, message: str = ""):
        super().__init__(message or self.reply_text)


class UsageError(ReminderError):
    """Too few arguments after `!remind`."""

    reply_text = USAGE_TEXT


class FormatError(ReminderError):
    """The time or date could not be parsed."""

    reply_text = (
        "❌ Invalid time/date format. Examples:\n"
        "!remind 5m message\n"
        "!remind 25-12-2024 10:30 message"
    )


class PastDateError(ReminderError):
    """The date is valid but has already elapsed."""

    reply_text = "❌ Cannot set reminder in the past!"


class EmptyTextError(ReminderError):
    """The reminder message is blank."""

    reply_text = "❌ Reminder message cannot be empty!"
