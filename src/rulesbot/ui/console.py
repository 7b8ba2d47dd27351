"""Interactive console for managing the live Discord bot.

Besides lifecycle commands (status, restart, shutdown), any line that is not
a console command is run as an admin command, so ``config get appName`` or
``logs 20`` work here exactly as they do through ``/admin``.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
import os

import discord
from prompt_toolkit import print_formatted_text
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.patch_stdout import patch_stdout
from prompt_toolkit.shortcuts import PromptSession

from rulesbot.datatypes.errors import PersistenceError
from rulesbot.runtime import BotRuntime
from rulesbot.util.logger import get_logger

# Box drawing helpers for aligned console output
BOX_WIDTH = 45

def box_title(title: str) -> list[str]:
    inner_width = BOX_WIDTH - 2
    pad_left = (inner_width - len(title)) // 2
    pad_right = inner_width - len(title) - pad_left
    return [
        f"╔{'═' * inner_width}╗",
        f"║{' ' * pad_left}{title}{' ' * pad_right}║",
        f"╚{'═' * inner_width}╝"
    ]

logger = get_logger("console")

ConsoleHandler = Callable[["ConsoleControl", list[str]], Awaitable[None]]


@dataclass
class ConsoleCommand:
    """Definition of a console command."""
    name: str
    handler: ConsoleHandler
    description: str
    aliases: list[str] = field(default_factory=list)

    def matches(self, input_cmd: str) -> bool:
        return input_cmd == self.name or input_cmd in self.aliases


def console_print(message: str, style: str = "") -> None:
    """Render text via prompt_toolkit without breaking the active prompt."""
    formatted: FormattedText | str
    if style:
        formatted = FormattedText([(style, message)])
    else:
        formatted = message
    print_formatted_text(formatted)


class ConsoleControl:
    """Console-driven lifecycle controls for the running bot."""

    def __init__(self, runtime: BotRuntime) -> None:
        self.runtime = runtime
        self.shutdown_event = asyncio.Event()
        self.restart_event = asyncio.Event()
        self._bot: discord.Bot | None = None

    def set_bot(self, bot: discord.Bot | None) -> None:
        self._bot = bot

    @property
    def bot(self) -> discord.Bot | None:
        return self._bot

    def request_shutdown(self) -> None:
        self.shutdown_event.set()

    def request_restart(self) -> None:
        self.restart_event.set()

    def is_shutdown_requested(self) -> bool:
        return self.shutdown_event.is_set()

    def is_restart_requested(self) -> bool:
        return self.restart_event.is_set()


async def close_bot_instance(bot: discord.Bot | None, *, log_close: bool = False) -> None:
    """Close the Discord bot instance if it is active."""
    if bot is None or bot.is_closed():
        return

    try:
        await bot.close()
        if log_close:
            logger.info("Discord bot connection closed.")
    except Exception as exc:
        logger.exception("Error while closing Discord bot: %s", exc)


async def _request_lifecycle_action(control: ConsoleControl, *, restart: bool) -> None:
    if restart:
        control.request_restart()
    control.request_shutdown()
    await close_bot_instance(control.bot)


# ==================== Command Handlers ====================

async def cmd_help(control: ConsoleControl, args: list[str]) -> None:
    for line in box_title("Console Commands Reference"):
        console_print(line, "ansigreen")

    for cmd in CONSOLE_COMMANDS:
        aliases_str = f" (aliases: {', '.join(cmd.aliases)})" if cmd.aliases else ""
        console_print(f"\n  {cmd.name}{aliases_str}", "ansicyan")
        console_print(f"    {cmd.description}")

    console_print("\nAdmin commands:", "ansicyan")
    for line in control.runtime.registry.usage().rstrip("\n").split("\n"):
        console_print(f"  {line}")
    console_print("")


async def cmd_status(control: ConsoleControl, args: list[str]) -> None:
    for line in box_title("Bot Status"):
        console_print(line, "ansiblue")

    runtime = control.runtime
    console_print(f"  Rules:      {runtime.rules.root.title} ({runtime.rules.root.child_count} top-level)")
    server = runtime.status_server
    http_status = f"🟢 port {server.port}" if server.running else "🔴 not listening"
    console_print(f"  HTTP:       {http_status}")

    if control.bot:
        bot_status = "🟢 Connected" if not control.bot.is_closed() else "🔴 Disconnected"
        console_print(f"  Bot:        {bot_status}")
        console_print(f"  Guilds:     {len(control.bot.guilds)}")
        console_print(f"  Latency:    {control.bot.latency * 1000:.0f}ms")
    else:
        console_print("  Bot:        🔴 Not initialized")

    console_print("")


async def cmd_clear(control: ConsoleControl, args: list[str]) -> None:
    os.system('cls' if os.name == 'nt' else 'clear')
    console_print("Console cleared.", "ansigreen")


async def cmd_restart(control: ConsoleControl, args: list[str]) -> None:
    console_print("Restart requested. Bot will shut down and restart...", "ansiyellow")
    await _request_lifecycle_action(control, restart=True)


async def cmd_shutdown(control: ConsoleControl, args: list[str]) -> None:
    console_print("Shutdown requested.", "ansiyellow")
    await _request_lifecycle_action(control, restart=False)


CONSOLE_COMMANDS: list[ConsoleCommand] = [
    ConsoleCommand("help", cmd_help, "Show console and admin commands", ["h", "?"]),
    ConsoleCommand("status", cmd_status, "Display bot, rules and HTTP status", ["stat", "info"]),
    ConsoleCommand("clear", cmd_clear, "Clear the console screen", ["cls"]),
    ConsoleCommand("restart", cmd_restart, "Fully restart the bot", ["reboot"]),
    ConsoleCommand("shutdown", cmd_shutdown, "Gracefully shut down the bot", ["stop", "quit", "exit"]),
]


# ==================== Command Dispatcher ====================

async def handle_console_command(command: str, control: ConsoleControl) -> None:
    """Run a console command, or fall through to the admin command registry."""
    line = command.strip()
    if not line:
        return

    name, *args = line.split()
    for cmd in CONSOLE_COMMANDS:
        if cmd.matches(name.lower()):
            await cmd.handler(control, args)
            return

    try:
        reply = await control.runtime.registry.dispatch(line, control.runtime.command_context())
    except PersistenceError as exc:
        logger.error("Console command '%s' failed: %s", line, exc)
        console_print(f"Failed to save: {exc}", "ansired")
        return
    console_print(reply.rstrip("\n"))


async def run_console(control: ConsoleControl) -> None:
    """Run the interactive console until shutdown is requested."""
    session = PromptSession("> ")

    for line in box_title("RulesBot Interactive Console"):
        console_print(line, "ansigreen")
    console_print("Type 'help' for available commands or 'exit' to quit.\n", "ansibrightblack")

    with patch_stdout():
        while not control.is_shutdown_requested():
            try:
                line = await session.prompt_async()
            except (EOFError, KeyboardInterrupt):
                console_print("\nShutdown requested by user.", "ansiyellow")
                await _request_lifecycle_action(control, restart=False)
                break
            try:
                await handle_console_command(line, control)
            except Exception as exc:
                logger.exception("Error executing console command '%s': %s", line, exc)
                console_print(f"Error: {exc}", "ansired")


@asynccontextmanager
async def console_session(control: ConsoleControl) -> AsyncIterator[ConsoleControl]:
    """Run the console alongside the bot, cleaning up automatically."""
    console_task = asyncio.create_task(run_console(control))
    try:
        yield control
    finally:
        control.request_shutdown()
        console_task.cancel()
        try:
            await console_task
        except asyncio.CancelledError:
            pass
