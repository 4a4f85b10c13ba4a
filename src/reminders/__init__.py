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
Reminders Package

Time parsing and one-shot scheduling for the `!remind` command.
"""

from .errors import (
    ReminderError,
    UsageError,
    FormatError,
    PastDateError,
    EmptyTextError,
)
from .time_parser import (
    RelativeTime,
    AbsoluteTime,
    ParseOutcome,
    ParseStatus,
    parse_relative,
    parse_relative_expression,
    parse_absolute,
    parse_absolute_expression,
    is_time_token,
    resolve_fire_time,
)
from .scheduler import PendingTimer, ReminderRequest, ReminderScheduler

__all__ = [
    "ReminderError",
    "UsageError",
    "FormatError",
    "PastDateError",
    "EmptyTextError",
    "RelativeTime",
    "AbsoluteTime",
    "ParseOutcome",
    "ParseStatus",
    "parse_relative",
    "resolve_fire_time",
    "parse_relative_expression",
    "parse_absolute",
    "parse_absolute_expression",
    "is_time_token",
    "PendingTimer",
    "ReminderRequest",
    "ReminderScheduler",
]
