"""
remindbot Discord Gateway

Maintains the Discord connection for the reminder bot. Inbound messages are
handed to the command dispatcher; replies and fired reminders go back out
through this client.
"""

import asyncio
import logging
import sys
from typing import Any, Optional

import discord
from dotenv import load_dotenv

from commands import CommandDispatcher, InboundMessage
from config import BotConfig, ConfigError
from reminders import ReminderScheduler

load_dotenv()

# Discord message length limit
DISCORD_MAX_LENGTH = 2000

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("remindbot")


def chunk_message(content: str, limit: int = DISCORD_MAX_LENGTH) -> list[str]:
    """Split a message into chunks at line or word boundaries."""
    chunks = []
    remaining = content

    while len(remaining) > limit:
        # Prefer a newline in the back half, then a space, then a hard cut
        break_at = remaining.rfind("\n", 0, limit)
        if break_at <= limit // 2:
            break_at = remaining.rfind(" ", 0, limit)
        if break_at <= limit // 2:
            break_at = limit

        chunks.append(remaining[:break_at].rstrip())
        remaining = remaining[break_at:].lstrip()

    if remaining or not chunks:
        chunks.append(remaining)
    return chunks


class DiscordBot(discord.Client):
    """Discord client acting as the channel gateway for the dispatcher."""

    def __init__(self, config: BotConfig):
        intents = discord.Intents.default()
        intents.message_content = True
        intents.guilds = True
        intents.messages = True

        super().__init__(intents=intents)

        self.config = config
        self.scheduler = ReminderScheduler()
        self.dispatcher = CommandDispatcher(config, self.scheduler, self)

    async def on_ready(self):
        """Called when the bot has connected to Discord."""
        logger.info(f"Logged in as {self.user} (ID: {self.user.id})")
        logger.info(f"Monitoring channel {self.config.channel_id}")

    async def on_message(self, message: discord.Message):
        """Forward every observed message to the dispatcher."""
        # Own messages are included; the dispatcher filters by channel only
        event = InboundMessage(
            sender_id=str(message.channel.id),
            body=message.content,
            context=message,
        )
        await self.dispatcher.handle(event)

    # --- Channel gateway ---

    async def reply(self, context: Any, text: str) -> None:
        """Reply to the original message in its channel."""
        chunks = chunk_message(text)
        await context.reply(chunks[0])
        for chunk in chunks[1:]:
            await context.channel.send(chunk)

    async def send_message(self, destination_id: str, text: str) -> None:
        """Send to a channel, or by DM when the ID belongs to a user."""
        target = await self._resolve_destination(int(destination_id))
        for chunk in chunk_message(text):
            await target.send(chunk)

    async def _resolve_destination(self, destination_id: int) -> discord.abc.Messageable:
        channel: Optional[discord.abc.Messageable] = self.get_channel(destination_id)
        if channel is not None:
            return channel

        try:
            return await self.fetch_channel(destination_id)
        except discord.NotFound:
            pass

        user = self.get_user(destination_id)
        if user is None:
            user = await self.fetch_user(destination_id)
        return user

    async def close(self):
        """Clean up resources on shutdown."""
        await self.scheduler.shutdown()
        await super().close()


async def main(config: BotConfig):
    """Run the bot until disconnected."""
    logging.getLogger().setLevel(config.log_level)
    logger.info("Starting reminder bot...")

    bot = DiscordBot(config)
    async with bot:
        await bot.start(config.discord_token)


def run():
    """Console entry point: validate configuration, then run the bot."""
    try:
        config = BotConfig.from_env()
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        print(f"Error: {e}", file=sys.stderr)
        print("Please set it in your .env file", file=sys.stderr)
        sys.exit(1)

    asyncio.run(main(config))


if __name__ == "__main__":
    run()
