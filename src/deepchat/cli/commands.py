"""Slash-command dispatch for the interactive loop.

A fixed table of plain functions. Input whose first token is not in the
table, including unknown `/words`, is chat content.
"""

from collections.abc import Callable
from enum import Enum

from ..errors import CommandError
from ..session import ChatSession
from .console import ChatConsole


class CommandResult(str, Enum):
    """Outcome of a handled command."""

    HANDLED = "handled"
    EXIT = "exit"


CommandHandler = Callable[[ChatSession, ChatConsole], CommandResult]


def _help(session: ChatSession, console: ChatConsole) -> CommandResult:
    console.print_help()
    return CommandResult.HANDLED


def _clear(session: ChatSession, console: ChatConsole) -> CommandResult:
    session.reset()
    console.print_info("Conversation history cleared!")
    return CommandResult.HANDLED


def _history(session: ChatSession, console: ChatConsole) -> CommandResult:
    console.print_history(session.history)
    return CommandResult.HANDLED


def _exit(session: ChatSession, console: ChatConsole) -> CommandResult:
    return CommandResult.EXIT


COMMANDS: dict[str, CommandHandler] = {
    "/help": _help,
    "/clear": _clear,
    "/history": _history,
    "/exit": _exit,
    "/quit": _exit,
}


def parse_command(text: str) -> str | None:
    """Return the command token if `text` starts with a known command."""
    parts = text.strip().split(maxsplit=1)
    if not parts:
        return None
    token = parts[0].lower()
    return token if token in COMMANDS else None


def run_command(name: str, session: ChatSession, console: ChatConsole) -> CommandResult:
    """Invoke a command by name.

    Raises:
        CommandError: If `name` is not in the command table
    """
    try:
        handler = COMMANDS[name.lower()]
    except KeyError:
        raise CommandError(f"Unknown command: {name}") from None
    return handler(session, console)


def dispatch(text: str, session: ChatSession, console: ChatConsole) -> CommandResult | None:
    """Run `text` as a command if it is one.

    Returns:
        The command's result, or None when `text` is chat content
    """
    name = parse_command(text)
    if name is None:
        return None
    return run_command(name, session, console)
