from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from rulesbot.cog import events_listener
from rulesbot.cog.events_listener import HINT, EventsListenerCog, strip_mentions
from rulesbot.posting.rule_message import ViewAllRulesView
from rulesbot.runtime import BotRuntime

BOT_USER = SimpleNamespace(id=999, name="RulesBot")


@pytest.fixture()
def fake_bot():
    return SimpleNamespace(
        user=BOT_USER,
        guilds=[],
        add_view=MagicMock(),
        change_presence=AsyncMock(),
        add_cog=MagicMock(),
    )


@pytest.fixture()
def runtime(config_store, rule_document, fake_bot):
    runtime = BotRuntime.create(config_store, rule_document)
    runtime.bot = fake_bot
    runtime.status_server = SimpleNamespace(listen=AsyncMock())
    runtime.scheduler = SimpleNamespace(start=MagicMock())
    return runtime


def make_message(content, *, mentions=(BOT_USER,), bot_author=False):
    return SimpleNamespace(
        content=content,
        mentions=list(mentions),
        author=SimpleNamespace(bot=bot_author, name="member"),
        channel=SimpleNamespace(name="general", id=5, send=AsyncMock()),
    )


def test_setup_adds_cog(fake_bot, runtime):
    events_listener.setup(fake_bot, runtime)

    assert isinstance(fake_bot.add_cog.call_args.args[0], EventsListenerCog)


@pytest.mark.asyncio
async def test_on_ready_starts_background_work_once(fake_bot, runtime):
    cog = EventsListenerCog(fake_bot, runtime)

    await cog.on_ready()
    await cog.on_ready()

    assert fake_bot.change_presence.await_count == 2
    fake_bot.add_view.assert_called_once()
    assert isinstance(fake_bot.add_view.call_args.args[0], ViewAllRulesView)
    runtime.status_server.listen.assert_awaited_once_with(8080)
    runtime.scheduler.start.assert_called_once_with(fake_bot)


@pytest.mark.asyncio
async def test_mention_asking_for_rules_posts_whole_document(fake_bot, runtime):
    cog = EventsListenerCog(fake_bot, runtime)
    message = make_message("<@999> what are the RULES?")

    await cog.on_message(message)

    message.channel.send.assert_awaited_once_with(f"```\n{runtime.rules.format().rstrip()}\n```")


@pytest.mark.asyncio
async def test_mention_asking_for_a_rule_posts_embed(fake_bot, runtime):
    cog = EventsListenerCog(fake_bot, runtime)
    message = make_message("<@999> tell me a rule")

    await cog.on_message(message)

    assert "embed" in message.channel.send.await_args.kwargs


@pytest.mark.asyncio
async def test_other_mentions_get_hint(fake_bot, runtime):
    cog = EventsListenerCog(fake_bot, runtime)
    message = make_message("<@!999> hello")

    await cog.on_message(message)

    message.channel.send.assert_awaited_once_with(HINT)


@pytest.mark.asyncio
async def test_ignores_bots_and_unmentioned_messages(fake_bot, runtime):
    cog = EventsListenerCog(fake_bot, runtime)
    from_bot = make_message("rules", bot_author=True)
    unmentioned = make_message("rules", mentions=())

    await cog.on_message(from_bot)
    await cog.on_message(unmentioned)

    from_bot.channel.send.assert_not_awaited()
    unmentioned.channel.send.assert_not_awaited()


def test_strip_mentions_removes_only_the_bot():
    assert strip_mentions("<@999> hi <@!999> and <@123>", 999) == " hi  and <@123>"


@pytest.mark.asyncio
async def test_bot_name_containing_rules_does_not_select_all_rules(fake_bot, runtime):
    assert "rules" in BOT_USER.name.lower()
    cog = EventsListenerCog(fake_bot, runtime)
    message = make_message("<@999> how are you?")

    await cog.on_message(message)

    message.channel.send.assert_awaited_once_with(HINT)
