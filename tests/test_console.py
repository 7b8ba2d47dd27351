"""Tests for the interactive console."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from rulesbot.datatypes.errors import PersistenceError
from rulesbot.runtime import BotRuntime
from rulesbot.ui import console
from rulesbot.ui.console import ConsoleControl, close_bot_instance, handle_console_command


@pytest.fixture()
def printed(monkeypatch):
    lines = []
    monkeypatch.setattr(console, "console_print", lambda message, style="": lines.append(message))
    return lines


@pytest.fixture()
def control(config_store, rule_document):
    return ConsoleControl(BotRuntime.create(config_store, rule_document))


@pytest.mark.asyncio
async def test_close_bot_instance_with_none():
    await close_bot_instance(None)


@pytest.mark.asyncio
async def test_close_bot_instance_with_closed_bot():
    bot = MagicMock()
    bot.is_closed.return_value = True

    await close_bot_instance(bot)

    bot.close.assert_not_called()


@pytest.mark.asyncio
async def test_close_bot_instance_handles_exceptions():
    bot = MagicMock()
    bot.is_closed.return_value = False
    bot.close = AsyncMock(side_effect=RuntimeError("already gone"))

    await close_bot_instance(bot)


@pytest.mark.asyncio
async def test_admin_commands_fall_through_to_registry(control, printed):
    await handle_console_command("config get rulePosts.checkEverySecs", control)

    assert printed == ["rulePosts.checkEverySecs is 60"]


@pytest.mark.asyncio
async def test_console_can_change_config(control, printed, config_store):
    await handle_console_command("config set rulePosts.minMembers 0", control)

    assert printed == ["Set rulePosts.minMembers to 0"]
    assert config_store.get_value("rulePosts.minMembers") == 0


@pytest.mark.asyncio
async def test_rules_editor_unavailable_on_console(control, printed):
    await handle_console_command("rules", control)

    assert printed == ["Rules can only be edited from Discord; this session cannot open the editor."]


@pytest.mark.asyncio
async def test_blank_line_is_ignored(control, printed):
    await handle_console_command("   ", control)

    assert printed == []


@pytest.mark.asyncio
async def test_shutdown_alias(control, printed):
    await handle_console_command("quit", control)

    assert control.is_shutdown_requested()
    assert not control.is_restart_requested()


@pytest.mark.asyncio
async def test_restart_requests_both_events(control, printed):
    await handle_console_command("restart", control)

    assert control.is_shutdown_requested()
    assert control.is_restart_requested()


@pytest.mark.asyncio
async def test_help_lists_admin_usage(control, printed):
    await handle_console_command("help", control)

    assert any("Admin commands:" in line for line in printed)
    assert any("logs [count]" in line for line in printed)


@pytest.mark.asyncio
async def test_persistence_failure_is_printed(control, printed, monkeypatch):
    monkeypatch.setattr(control.runtime.registry, "dispatch", AsyncMock(side_effect=PersistenceError("read-only")))

    await handle_console_command("config set appName X", control)

    assert printed == ["Failed to save: read-only"]


@pytest.mark.asyncio
async def test_status_reports_stopped_http_server(control, printed):
    await handle_console_command("status", control)

    assert "  Rules:      Workplace Rules (3 top-level)" in printed
    assert "  HTTP:       🔴 not listening" in printed
    assert "  Bot:        🔴 Not initialized" in printed
