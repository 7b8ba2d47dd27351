"""
Messages that show rules to channel members.

A rule message is an embed headed by the document title, holding a randomly
picked part of the document, an optional footer from the config and a button
that shows the whole document to whoever clicks it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import discord

from rulesbot.configuration.config_store import ConfigStore
from rulesbot.datatypes.rule_datatypes import RuleNode
from rulesbot.rules.rule_document import RuleDocument, format_rule
from rulesbot.util.discord_utils import CODE_FENCE, chunk_code_blocks
from rulesbot.util.logger import get_logger

logger = get_logger("rule_message")

LOG_TITLE_LENGTH = 15
EMBED_DESCRIPTION_LIMIT = 4096
VIEW_ALL_LABEL = "View all rules"
VIEW_ALL_CUSTOM_ID = "rulesbot:view-all-rules"


def abbrev_title(rule: RuleNode) -> str:
    """Shorten a rule title for log lines."""
    if len(rule.title) <= LOG_TITLE_LENGTH:
        return rule.title
    return rule.title[:LOG_TITLE_LENGTH] + "..."


@dataclass(slots=True)
class RuleMessage:
    """A message ready to send.

    Attributes:
        title: Short description for log lines (``rule "Be kind..."``, ``rules``).
        text: Plain-text rendering of the rules shown.
        embed: Embed for random-rule messages, ``None`` for whole-document posts.
        rule: The picked rule, ``None`` for whole-document posts.
    """

    title: str
    text: str
    embed: Optional[discord.Embed] = None
    rule: Optional[RuleNode] = None


def _code_block(text: str) -> str:
    block = f"{CODE_FENCE}\n{text.rstrip()}\n{CODE_FENCE}"
    if len(block) <= EMBED_DESCRIPTION_LIMIT:
        return block
    return chunk_code_blocks(text, EMBED_DESCRIPTION_LIMIT)[0]


def build_random_rule_message(document: RuleDocument, config: ConfigStore, rng: Any = None) -> RuleMessage:
    """Pick a random rule from ``document`` and wrap it in an embed."""
    root = document.root
    rule = document.pick_random(rng)
    text = format_rule(rule)

    embed = discord.Embed(
        title=f"Here's an excerpt from the {root.title}",
        description=_code_block(text),
        color=discord.Color.blurple(),
    )
    footer = config.pick_random_footer(rng)
    if footer:
        embed.set_footer(text=footer)

    return RuleMessage(title=f'rule "{abbrev_title(rule)}"', text=text, embed=embed, rule=rule)


def build_all_rules_message(document: RuleDocument) -> RuleMessage:
    return RuleMessage(title="rules", text=document.format())


class ViewAllRulesView(discord.ui.View):
    """Persistent button that replies privately with the whole document."""

    def __init__(self, document: RuleDocument) -> None:
        super().__init__(timeout=None)
        self.document = document

    @discord.ui.button(label=VIEW_ALL_LABEL, style=discord.ButtonStyle.secondary, custom_id=VIEW_ALL_CUSTOM_ID)
    async def view_all(self, button: discord.ui.Button, interaction: discord.Interaction) -> None:
        chunks = chunk_code_blocks(self.document.format())
        await interaction.response.send_message(chunks[0], ephemeral=True)
        for chunk in chunks[1:]:
            await interaction.followup.send(chunk, ephemeral=True)

        user = getattr(interaction.user, "name", "unknown")
        channel = getattr(interaction.channel, "name", "unknown")
        logger.info("Posted ephemeral message containing all rules to @%s in #%s", user, channel)


async def send_rule_message(channel: discord.abc.Messageable, message: RuleMessage, document: RuleDocument) -> None:
    """Send ``message`` to ``channel``, splitting whole-document posts as needed."""
    if message.embed is not None:
        await channel.send(embed=message.embed, view=ViewAllRulesView(document))
        return

    for chunk in chunk_code_blocks(message.text):
        await channel.send(chunk)
