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
Chat Commands Package

Literal-prefix command handling for the monitored channel.
"""

from .dispatcher import (
    ChannelGateway,
    CommandDispatcher,
    InboundMessage,
    HELP_TEXT,
    PING_REPLY,
    format_reminder,
)

__all__ = [
    "ChannelGateway",
    "CommandDispatcher",
    "InboundMessage",
    "HELP_TEXT",
    "PING_REPLY",
    "format_reminder",
]
