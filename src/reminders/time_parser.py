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
Time Parser Module

Parses the time arguments of `!remind` into a delay in milliseconds.
Supports relative durations ("30s", "5m", "2h", "1d") and absolute local
date/times ("25-12-2024 10:30", "2024/12/25 10:30", "25-12-2024").
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional, Union

from .errors import FormatError

logger = logging.getLogger("remindbot.reminders.time_parser")

# Milliseconds per relative time unit
UNIT_MULTIPLIERS = {
    "s": 1000,
    "m": 60 * 1000,
    "h": 60 * 60 * 1000,
    "d": 24 * 60 * 60 * 1000,
}

# Time of day used when only a date is given
DEFAULT_HOUR = 9
DEFAULT_MINUTE = 0

# Longest accepted relative value; larger ones overflow the date range
MAX_RELATIVE_DIGITS = 12

RELATIVE_PATTERN = re.compile(r"^(\d+)([smhd])$", re.ASCII)
TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$", re.ASCII)
DMY_PATTERN = re.compile(r"^(\d{1,2})[-/](\d{1,2})[-/](\d{4})$", re.ASCII)
YMD_PATTERN = re.compile(r"^(\d{4})[-/](\d{1,2})[-/](\d{1,2})$", re.ASCII)


@dataclass(frozen=True)
class RelativeTime:
    """A duration offset from now, e.g. 5m."""

    value: int
    unit: str  # one of s, m, h, d

    @property
    def delay_ms(self) -> int:
        return self.value * UNIT_MULTIPLIERS[self.unit]


@dataclass(frozen=True)
class AbsoluteTime:
    """A calendar date and time of day in local machine time."""

    year: int
    month: int
    day: int
    hour: int = DEFAULT_HOUR
    minute: int = DEFAULT_MINUTE

    def to_datetime(self) -> datetime:
        """
        Build the local datetime for this expression.

        Raises:
            FormatError: If the components do not form a real date and time
                (e.g. 31 April, hour 24). Dates are never rolled over.
        """
        try:
            return datetime(self.year, self.month, self.day, self.hour, self.minute)
        except ValueError as e:
            raise FormatError(f"Invalid date/time {self}: {e}") from e


TimeExpression = Union[RelativeTime, AbsoluteTime]


class ParseStatus(Enum):
    DELAY = "delay"
    IN_THE_PAST = "in_the_past"
    INVALID = "invalid"


@dataclass(frozen=True)
class ParseOutcome:
    """Result of resolving an absolute time expression against now."""

    status: ParseStatus
    delay_ms: Optional[int] = None  # Only set for ParseStatus.DELAY

    @classmethod
    def delay(cls, delay_ms: int) -> "ParseOutcome":
        return cls(ParseStatus.DELAY, delay_ms)

    @classmethod
    def in_the_past(cls) -> "ParseOutcome":
        return cls(ParseStatus.IN_THE_PAST)

    @classmethod
    def invalid(cls) -> "ParseOutcome":
        return cls(ParseStatus.INVALID)

    @property
    def is_delay(self) -> bool:
        return self.status is ParseStatus.DELAY


def parse_relative_expression(token: str) -> Optional[RelativeTime]:
    """
    Parse a relative token like "5m". Returns None if it is not one.

    Raises:
        FormatError: If the token matches but its value is too large to schedule
    """
    match = RELATIVE_PATTERN.fullmatch(token)
    if not match:
        return None
    digits = match.group(1).lstrip("0") or "0"
    if len(digits) > MAX_RELATIVE_DIGITS:
        raise FormatError(f"Relative value too large: {token}")
    return RelativeTime(value=int(digits), unit=match.group(2))


def resolve_fire_time(now: datetime, delay_ms: int) -> datetime:
    """
    Local time at which a delay starting now elapses.

    Raises:
        FormatError: If the result falls outside the supported date range
    """
    try:
        return now + timedelta(milliseconds=delay_ms)
    except OverflowError as e:
        raise FormatError(f"Delay of {delay_ms} ms is out of range") from e


def parse_relative(token: str) -> Optional[int]:
    """
    Convert a relative token into a delay in milliseconds.

    Args:
        token: Digits followed by one unit letter (s, m, h, d)

    Returns:
        The delay, or None when the token has another shape. A zero delay
        ("0s") is a match and returns 0, so callers must test against None.

    Raises:
        FormatError: If the value has more than MAX_RELATIVE_DIGITS digits
    """
    expression = parse_relative_expression(token)
    if expression is None:
        return None
    return expression.delay_ms


def is_time_token(token: str) -> bool:
    """Check if a token looks like a time of day (H:MM or HH:MM)."""
    return TIME_PATTERN.fullmatch(token) is not None


def parse_absolute_expression(
    date_token: str, time_token: Optional[str] = None
) -> Optional[AbsoluteTime]:
    """
    Parse date and optional time tokens into an AbsoluteTime.

    Accepted shapes, with - or / as separator:
    - DD-MM-YYYY HH:MM
    - YYYY-MM-DD HH:MM
    - DD-MM-YYYY (time defaults to 09:00)

    Only the shape is checked here; calendar validity is checked by
    AbsoluteTime.to_datetime().

    Returns:
        The parsed expression, or None if the tokens match no shape
    """
    if time_token is None:
        match = DMY_PATTERN.fullmatch(date_token)
        if not match:
            return None
        day, month, year = (int(g) for g in match.groups())
        return AbsoluteTime(year=year, month=month, day=day)

    time_match = TIME_PATTERN.fullmatch(time_token)
    if not time_match:
        return None
    hour, minute = int(time_match.group(1)), int(time_match.group(2))

    match = DMY_PATTERN.fullmatch(date_token)
    if match:
        day, month, year = (int(g) for g in match.groups())
        return AbsoluteTime(year, month, day, hour, minute)

    match = YMD_PATTERN.fullmatch(date_token)
    if match:
        year, month, day = (int(g) for g in match.groups())
        return AbsoluteTime(year, month, day, hour, minute)

    return None


def parse_absolute(
    date_token: str,
    time_token: Optional[str] = None,
    now: Optional[datetime] = None,
) -> ParseOutcome:
    """
    Resolve absolute date/time tokens into a delay from now.

    Args:
        date_token: Date in DD-MM-YYYY or YYYY-MM-DD form
        time_token: Optional HH:MM; when absent, 09:00 is used
        now: Reference time (defaults to the current local time)

    Returns:
        ParseOutcome.delay for a future (or current) target,
        ParseOutcome.in_the_past for an elapsed target,
        ParseOutcome.invalid for malformed or impossible dates
    """
    expression = parse_absolute_expression(date_token, time_token)
    if expression is None:
        return ParseOutcome.invalid()

    try:
        target = expression.to_datetime()
    except FormatError as e:
        logger.debug(str(e))
        return ParseOutcome.invalid()

    if now is None:
        now = datetime.now()

    delta = target - now
    if delta < timedelta(0):
        return ParseOutcome.in_the_past()

    return ParseOutcome.delay(delta // timedelta(milliseconds=1))
