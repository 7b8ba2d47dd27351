"""
Discord Rules Bot
=================

A Discord bot that keeps a curated rules document in front of members by
posting a random excerpt into busy channels, and lets administrators edit the
document and the bot configuration at runtime.
"""

import os
import sys
from pathlib import Path

def resolve_base_dir() -> Path:
    """Determine the base directory of the project.

    Resolution order:
    1. RULESBOT_HOME environment variable, if set.
    2. If running in a frozen/compiled context, use the executable's directory.
    3. Otherwise, assume running from source and use the grandparent of this file's directory.
    """
    if env_home := os.getenv("RULESBOT_HOME"):
        return Path(env_home).resolve()

    if getattr(sys, "frozen", False) or getattr(sys, "compiled", False):
        return Path(sys.argv[0]).resolve().parent

    return Path(__file__).resolve().parents[2]

BASE_DIR = resolve_base_dir()
os.chdir(BASE_DIR)

import asyncio
import discord

from rulesbot.configuration.config_store import ConfigStore
from rulesbot.datatypes.errors import ParseError, RulesBotError
from rulesbot.rules.rule_document import RuleDocument
from rulesbot.runtime import BotRuntime
from rulesbot.ui.console import ConsoleControl, close_bot_instance, console_session
from rulesbot.util.logger import get_logger, handle_exception


logger = get_logger("main")

RESTART_EXIT_CODE = 42


def config_path() -> Path:
    return Path(os.getenv("RULESBOT_CONFIG") or BASE_DIR / "config" / "config.yml").resolve()


def rules_path() -> Path:
    return Path(os.getenv("RULESBOT_RULES") or BASE_DIR / "config" / "rules.txt").resolve()


def load_runtime() -> BotRuntime:
    """Load the config and rules files. Both are required to start.

    Raises
    ------
    RulesBotError
        If either file is missing, unreadable or invalid.
    """
    try:
        config = ConfigStore.load(config_path())
    except RulesBotError as exc:
        logger.critical("Failed to load config: %s", exc)
        raise

    try:
        rules = RuleDocument.load(rules_path())
    except ParseError as exc:
        logger.critical("Failed to load rules: %s", exc)
        raise

    return BotRuntime.create(config, rules)


def build_intents() -> discord.Intents:
    """Intents for reading mentions, counting channel members and reading history."""
    intents = discord.Intents.default()
    intents.message_content = True
    intents.guilds = True
    intents.messages = True
    intents.members = True
    return intents


def load_cogs(discord_bot_instance: discord.Bot, runtime: BotRuntime) -> None:
    from rulesbot.cog import admin_cmds, events_listener

    admin_cmds.setup(discord_bot_instance, runtime)
    events_listener.setup(discord_bot_instance, runtime)

    logger.info("All cogs loaded successfully.")


def create_bot(runtime: BotRuntime) -> discord.Bot:
    """Instantiate the Discord bot, register cogs and wire config listeners."""
    bot = discord.Bot(intents=build_intents())
    runtime.bot = bot
    load_cogs(bot, runtime)
    runtime.register_change_listeners()
    return bot


async def start_bot(bot: discord.Bot, token: str) -> None:
    logger.info("Attempting to connect to Discord…")
    try:
        await bot.start(token)
    except asyncio.CancelledError:
        logger.info("Discord bot start cancelled; shutting down")
    finally:
        logger.info("Discord bot start routine finished.")


async def shutdown_runtime(runtime: BotRuntime) -> None:
    """Stop background work and close the Discord connection."""
    try:
        await runtime.scheduler.shutdown()
    except Exception as exc:
        logger.exception("Error during rule post scheduler shutdown: %s", exc)

    try:
        await runtime.status_server.stop()
    except Exception as exc:
        logger.exception("Error during status server shutdown: %s", exc)

    await close_bot_instance(runtime.bot, log_close=True)
    logger.info("Shutdown complete.")


async def run_bot_session(runtime: BotRuntime, control: ConsoleControl) -> int:
    """Run the bot alongside the console, returning an exit code."""
    bot = runtime.bot
    assert bot is not None
    control.set_bot(bot)
    exit_code = 0

    try:
        async with console_session(control):
            try:
                await start_bot(bot, str(runtime.config.get_value("token")))
            except discord.LoginFailure as exc:
                logger.critical("Discord rejected the bot token: %s", exc)
                exit_code = 1
            except Exception as exc:
                logger.critical("Discord bot runtime error: %s", exc)
                exit_code = 1
    finally:
        control.set_bot(None)
        await shutdown_runtime(runtime)

    return exit_code


async def async_main() -> int:
    """Bootstrap the bot and console, returning an exit code."""
    try:
        runtime = load_runtime()
    except RulesBotError:
        return 1

    try:
        create_bot(runtime)
    except Exception as exc:
        logger.critical("Failed to initialize Discord bot: %s", exc)
        return 1

    control = ConsoleControl(runtime)
    exit_code = await run_bot_session(runtime, control)

    if control.is_restart_requested():
        logger.info("Restart requested, returning exit code %d to trigger restart", RESTART_EXIT_CODE)
        return RESTART_EXIT_CODE

    return exit_code


def main() -> int:
    """Entrypoint that runs the async runtime and returns the process exit code."""
    sys.excepthook = handle_exception
    logger.info("Starting Discord Rules Bot…")
    try:
        exit_code = asyncio.run(async_main())

        if exit_code == RESTART_EXIT_CODE:
            logger.info("Restart requested; replacing current process with new instance.")
            os.execv(sys.executable, [sys.executable] + sys.argv)

        return exit_code
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")
        return 0
    except Exception as exc:
        logger.critical("An unexpected error occurred while running the bot: %s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
