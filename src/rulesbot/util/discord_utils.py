"""
discord_utils.py
================

Stateless Discord helpers shared by the cogs, the post command and the
rule-post scheduler: permission checks, channel lookup and message chunking.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Optional

import discord

from rulesbot.util.logger import get_logger

logger = get_logger("discord_utils")

MESSAGE_LIMIT = 2000
CODE_FENCE = "```"


def bot_can_post(channel: discord.TextChannel, guild: discord.Guild) -> bool:
    """
    Determine if the bot can read history and send messages in a text channel.

    Args:
        channel (discord.TextChannel): The channel to check permissions for.
        guild (discord.Guild): The guild context to resolve the bot's member object.

    Returns:
        bool: True if the bot can read history and send messages, False otherwise.
    """
    me = getattr(guild, "me", None)
    if me is None:
        return False

    permissions = channel.permissions_for(me)
    return permissions.send_messages and permissions.read_message_history


def iter_postable_channels(guild: discord.Guild) -> Iterator[discord.TextChannel]:
    """Yield the guild's text channels where the bot may post rules."""
    for channel in getattr(guild, "text_channels", []):
        if bot_can_post(channel, guild):
            yield channel
        else:
            logger.debug("Skipping channel #%s without post permissions", channel.name)


def find_text_channel(guilds: Iterable[discord.Guild], name: str) -> Optional[discord.TextChannel]:
    """Return the first text channel called ``name`` (a leading ``#`` is ignored)."""
    wanted = name.lstrip("#")
    for guild in guilds:
        for channel in getattr(guild, "text_channels", []):
            if channel.name == wanted:
                return channel
    return None


def has_permissions(application_context: discord.ApplicationContext, **required_permissions) -> bool:
    """
    Check if the command issuer has all specified permissions in the guild.

    Args:
        application_context (discord.ApplicationContext): The command context.
        **required_permissions: Permission flags to check.

    Returns:
        bool: True if all permissions are present, False otherwise.
    """
    if not isinstance(application_context.author, discord.Member):
        return False
    return all(getattr(application_context.author.guild_permissions, permission_name, False) for permission_name in required_permissions)


def chunk_code_blocks(text: str, limit: int = MESSAGE_LIMIT) -> list[str]:
    """Split ``text`` at line boundaries into code blocks that each fit in one message.

    Code blocks keep the outline's leading spaces, which Discord strips from
    ordinary message text. A single line longer than the limit is cut.
    """
    room = limit - 2 * len(CODE_FENCE) - 2
    chunks: list[str] = []
    current = ""
    for line in text.rstrip("\n").split("\n"):
        while len(line) > room:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:room])
            line = line[room:]
        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > room:
            chunks.append(current)
            current = line
        else:
            current = candidate
    if current or not chunks:
        chunks.append(current)
    return [f"{CODE_FENCE}\n{chunk}\n{CODE_FENCE}" for chunk in chunks]
