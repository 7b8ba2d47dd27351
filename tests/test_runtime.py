from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from rulesbot.runtime import BotRuntime, build_registry


def test_registry_order():
    assert [handler.name for handler in build_registry().handlers] == ["logs", "config", "rules", "post"]


def test_context_without_bot_cannot_post(config_store, rule_document):
    runtime = BotRuntime.create(config_store, rule_document)

    context = runtime.command_context()

    assert context.config is config_store
    assert context.rules is rule_document
    assert context.find_channel is None
    assert context.open_rules_editor is None


@pytest.mark.asyncio
async def test_find_channel_searches_guilds(config_store, rule_document):
    general = SimpleNamespace(name="general")
    runtime = BotRuntime.create(config_store, rule_document)
    runtime.bot = SimpleNamespace(guilds=[SimpleNamespace(text_channels=[general])])

    context = runtime.command_context()

    assert await context.find_channel("#general") is general
    assert await context.find_channel("nope") is None


@pytest.mark.asyncio
async def test_listening_port_change_restarts_status_server(config_store, rule_document):
    runtime = BotRuntime.create(config_store, rule_document)
    runtime.status_server.listen = AsyncMock()
    runtime.register_change_listeners()

    await config_store.set("listeningPort", "9090")

    runtime.status_server.listen.assert_awaited_once_with(9090)


@pytest.mark.asyncio
async def test_app_name_change_updates_presence(config_store, rule_document):
    runtime = BotRuntime.create(config_store, rule_document)
    runtime.bot = SimpleNamespace(user=SimpleNamespace(id=1), guilds=[], change_presence=AsyncMock())
    runtime.register_change_listeners()

    await config_store.set("appName", "Keeper")

    activity = runtime.bot.change_presence.await_args.kwargs["activity"]
    assert activity.name == "Keeper | the rules"


@pytest.mark.asyncio
async def test_update_presence_without_bot_is_noop(config_store, rule_document):
    runtime = BotRuntime.create(config_store, rule_document)

    await runtime.update_presence("Anything")
