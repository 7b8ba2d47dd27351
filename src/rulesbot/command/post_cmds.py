"""``post`` admin command: post a random rule or the whole document to a channel."""

from __future__ import annotations

from typing import List

from rulesbot.command.command_registry import CommandContext, CommandHandler
from rulesbot.posting.rule_message import (
    build_all_rules_message,
    build_random_rule_message,
    send_rule_message,
)
from rulesbot.util.logger import get_logger

logger = get_logger("post_cmds")

USAGE = (
    "post rule <channel>\n"
    "    Post a randomly selected rule to a channel\n"
    "    channel - the channel to post the rule to\n"
    "post rules <channel>\n"
    "    Post all rules to a channel\n"
    "    channel - the channel to post the rules to"
)

POST_TYPES = ("rule", "rules")


class PostHandler(CommandHandler):
    def __init__(self) -> None:
        super().__init__("post", USAGE)

    async def handle(self, args: List[str], context: CommandContext) -> str:
        if len(args) != 2 or args[0] not in POST_TYPES or not args[1]:
            return USAGE
        post_type, channel_name = args

        if context.find_channel is None:
            return "Posting is only available while connected to Discord."

        channel = await context.find_channel(channel_name)
        if channel is None:
            return f"{channel_name} is not a valid channel"

        if post_type == "rule":
            message = build_random_rule_message(context.rules, context.config)
        else:
            message = build_all_rules_message(context.rules)

        await send_rule_message(channel, message, context.rules)
        logger.info("[POST CMDS] Posted %s to #%s", message.title, channel.name)
        return f"Posted {message.title} to #{channel.name}"
