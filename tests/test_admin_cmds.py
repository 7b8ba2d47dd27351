"""Tests for the /admin slash command cog and the rules editor modal."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from rulesbot.cog import admin_cmds
from rulesbot.cog.admin_cmds import EDITOR_MAX_LENGTH, AdminCog, RulesEditorModal
from rulesbot.datatypes.errors import PersistenceError
from rulesbot.rules.rule_document import RuleDocument
from rulesbot.runtime import BotRuntime


@pytest.fixture()
def runtime(config_store, rule_document):
    return BotRuntime.create(config_store, rule_document)


def make_ctx(*, admin=True, guild_id=1):
    author = MagicMock(spec=discord.Member)
    author.name = "mod"
    author.guild_permissions = SimpleNamespace(administrator=admin)
    return SimpleNamespace(
        guild_id=guild_id,
        author=author,
        channel=SimpleNamespace(name="admin"),
        respond=AsyncMock(),
        defer=AsyncMock(),
        send_modal=AsyncMock(),
    )


def make_interaction():
    return SimpleNamespace(
        user=SimpleNamespace(name="mod"),
        response=SimpleNamespace(send_message=AsyncMock()),
    )


def test_setup_adds_cog(runtime):
    bot = MagicMock()

    admin_cmds.setup(bot, runtime)

    cog = bot.add_cog.call_args.args[0]
    assert isinstance(cog, AdminCog)
    assert cog.runtime is runtime


@pytest.mark.asyncio
async def test_rejects_non_admins(runtime):
    cog = AdminCog(MagicMock(), runtime)
    ctx = make_ctx(admin=False)

    await cog.admin.callback(cog, ctx, "config")

    ctx.respond.assert_awaited_once_with("Sorry, you must be a server admin to use this command", ephemeral=True)
    ctx.defer.assert_not_awaited()


@pytest.mark.asyncio
async def test_rejects_direct_messages(runtime):
    cog = AdminCog(MagicMock(), runtime)
    ctx = make_ctx(guild_id=None)

    await cog.admin.callback(cog, ctx, "config")

    ctx.respond.assert_awaited_once_with("This command can only be used in a server.", ephemeral=True)


@pytest.mark.asyncio
async def test_dispatches_config_get(runtime):
    cog = AdminCog(MagicMock(), runtime)
    ctx = make_ctx()

    await cog.admin.callback(cog, ctx, "config get appName")

    ctx.defer.assert_awaited_once_with(ephemeral=True)
    ctx.respond.assert_awaited_once_with("appName is RulesBot", ephemeral=True)


@pytest.mark.asyncio
async def test_empty_command_replies_with_usage(runtime):
    cog = AdminCog(MagicMock(), runtime)
    ctx = make_ctx()

    await cog.admin.callback(cog, ctx, "")

    ctx.respond.assert_awaited_once_with(runtime.registry.usage(), ephemeral=True)


@pytest.mark.asyncio
async def test_long_reply_is_attached(runtime, monkeypatch):
    cog = AdminCog(MagicMock(), runtime)
    ctx = make_ctx()
    monkeypatch.setattr(runtime.registry, "dispatch", AsyncMock(return_value="x" * 2500))

    await cog.admin.callback(cog, ctx, "logs 500")

    kwargs = ctx.respond.await_args.kwargs
    assert isinstance(kwargs["file"], discord.File)
    assert kwargs["ephemeral"] is True


@pytest.mark.asyncio
async def test_persistence_failure_is_reported(runtime, monkeypatch):
    cog = AdminCog(MagicMock(), runtime)
    ctx = make_ctx()
    monkeypatch.setattr(runtime.registry, "dispatch", AsyncMock(side_effect=PersistenceError("disk full")))

    await cog.admin.callback(cog, ctx, "config set appName X")

    ctx.respond.assert_awaited_once_with("Failed to save: disk full", ephemeral=True)


@pytest.mark.asyncio
async def test_rules_opens_modal_without_defer(runtime):
    cog = AdminCog(MagicMock(), runtime)
    ctx = make_ctx()

    await cog.admin.callback(cog, ctx, "rules")

    ctx.defer.assert_not_awaited()
    ctx.send_modal.assert_awaited_once()
    modal = ctx.send_modal.await_args.args[0]
    assert isinstance(modal, RulesEditorModal)
    assert modal.rules_input.value == runtime.rules.format()
    ctx.respond.assert_not_awaited()


@pytest.mark.asyncio
async def test_modal_submit_updates_rules(rule_document):
    modal = RulesEditorModal(rule_document, rule_document.format())
    modal.rules_input.value = "House Rules\n  Wipe your feet\n"
    interaction = make_interaction()

    await modal.callback(interaction)

    assert rule_document.root.title == "House Rules"
    interaction.response.send_message.assert_awaited_once_with("Rules updated.", ephemeral=True)


@pytest.mark.asyncio
async def test_modal_submit_rejects_empty_text(rule_document):
    modal = RulesEditorModal(rule_document, rule_document.format())
    modal.rules_input.value = "   \n"
    interaction = make_interaction()

    await modal.callback(interaction)

    assert rule_document.root.title == "Workplace Rules"
    interaction.response.send_message.assert_awaited_once_with("At least one rule is required", ephemeral=True)


@pytest.mark.asyncio
async def test_rules_too_long_for_editor_are_not_opened(config_store, rules_path):
    text = "House Rules\n" + "".join(f"  {n}. Rule number {n} covers one more point of conduct\n" for n in range(1, 121))
    rules_path.write_text(text, encoding="utf-8")
    document = RuleDocument.load(rules_path)
    runtime = BotRuntime.create(config_store, document)
    cog = AdminCog(MagicMock(), runtime)
    ctx = make_ctx()
    assert len(document.format()) > EDITOR_MAX_LENGTH

    await cog.admin.callback(cog, ctx, "rules")

    ctx.send_modal.assert_not_awaited()
    reply = ctx.respond.await_args.args[0]
    assert "cannot be edited here" in reply
    assert document.root.child_count == 120
    assert rules_path.read_text(encoding="utf-8") == text
