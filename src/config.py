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
Bot Configuration

Environment-sourced settings for the reminder bot. All required values are
validated at startup so a misconfigured process fails before connecting.
"""

import os
from dataclasses import dataclass

# Required environment variables, mapped to the config field they populate
REQUIRED_ENV = {
    "DISCORD_BOT_TOKEN": "discord_token",
    "REMINDER_CHANNEL_ID": "channel_id",
    "REMINDER_DESTINATION_ID": "destination_id",
}

# Level names accepted for LOG_LEVEL
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class ConfigError(Exception):
    """Raised when required configuration is missing or malformed."""

    pass


@dataclass(frozen=True)
class BotConfig:
    """Configuration for the reminder bot."""

    discord_token: str
    channel_id: str  # The only channel whose messages are acted on
    destination_id: str  # Channel or user that receives fired reminders
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "BotConfig":
        """
        Create config from environment variables.

        Raises:
            ConfigError: If any required variable is unset or blank, an ID
                is not numeric, or LOG_LEVEL is not a known level name
        """
        values = {}
        missing = []
        for env_name, field_name in REQUIRED_ENV.items():
            value = os.getenv(env_name, "").strip()
            if not value:
                missing.append(env_name)
            values[field_name] = value

        if missing:
            raise ConfigError(
                f"Missing required environment variable(s): {', '.join(missing)}"
            )

        for env_name in ("REMINDER_CHANNEL_ID", "REMINDER_DESTINATION_ID"):
            value = values[REQUIRED_ENV[env_name]]
            if not (value.isascii() and value.isdigit()):
                raise ConfigError(f"{env_name} must be a numeric Discord ID")

        log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
        if log_level not in LOG_LEVELS:
            raise ConfigError(
                f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}"
            )

        return cls(log_level=log_level, **values)
