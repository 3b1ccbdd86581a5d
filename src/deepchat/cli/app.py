"""Main CLI application using Typer."""
import asyncio
from enum import Enum
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from .. import __version__
from ..config import ChatConfig, load_config
from ..errors import ApiError, ConfigError
from ..llm import create_chat_client
from ..log import configure_logging
from ..session import ChatSession
from .commands import CommandResult, dispatch
from .console import ChatConsole


class LogLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


# Create Typer app
app = typer.Typer(
    name="deepchat",
    help="Terminal chat client for OpenAI-compatible chat-completion APIs",
    add_completion=True,
)

# Console for rich output
console = Console()


def _load(env_file: Path | None, **overrides: Any) -> ChatConfig:
    """Load configuration or exit with code 1."""
    try:
        return load_config(env_file=env_file, **overrides)
    except ConfigError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(code=1)


def _run_turn(
    text: str,
    session: ChatSession,
    chat_console: ChatConsole,
    runner: asyncio.Runner
) -> None:
    """Send one chat message and render the reply or the error."""
    try:
        if session.config.stream:
            chat_console.start_stream()
            try:
                runner.run(session.ask(text, on_chunk=chat_console.print_chunk))
            finally:
                chat_console.end_stream()
        else:
            with chat_console.thinking():
                response = runner.run(session.ask(text))
            chat_console.print_assistant_message(response.content)
    except KeyboardInterrupt:
        chat_console.print_warning("Request cancelled. Nothing was added to the history.")
    except ApiError as e:
        chat_console.print_error(f"Failed to get response: {e}")
        chat_console.print_info(e.hint)


def run_chat_loop(
    session: ChatSession,
    chat_console: ChatConsole,
    runner: asyncio.Runner
) -> None:
    """Read lines until /exit, /quit, Ctrl+C at the prompt, or EOF."""
    while True:
        try:
            text = chat_console.input()
        except (KeyboardInterrupt, EOFError):
            chat_console.console.print()
            return

        if not text:
            continue

        result = dispatch(text, session, chat_console)
        if result is CommandResult.EXIT:
            return
        if result is CommandResult.HANDLED:
            continue

        _run_turn(text, session, chat_console, runner)


def _chat(
    env_file: Path | None = None,
    model: str | None = None,
    temperature: float | None = None,
    max_tokens: int | None = None,
    timeout: float | None = None,
    system: str | None = None,
    stream: bool | None = None,
    markdown: bool = True,
) -> None:
    config = _load(
        env_file,
        model=model,
        temperature=temperature,
        max_tokens=max_tokens,
        timeout=timeout,
        system_prompt=system,
        stream=stream,
    )

    chat_console = ChatConsole(console, markdown=markdown)

    # One event loop for the whole session keeps the HTTP connection pool alive
    with asyncio.Runner() as runner:
        client = create_chat_client(config)
        session = ChatSession(config, client)
        try:
            chat_console.print_welcome(config)
            run_chat_loop(session, chat_console, runner)
        finally:
            runner.run(client.close())

    chat_console.print_goodbye()


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"deepchat {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    log_level: LogLevel = typer.Option(
        LogLevel.WARNING,
        "--log-level",
        "-l",
        help="Log verbosity on stderr: debug, info, warning, or error"
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit"
    ),
):
    """Chat with a remote model from the terminal. Starts `chat` by default."""
    configure_logging(log_level.value)
    if ctx.invoked_subcommand is None:
        _chat()


@app.command()
def chat(
    model: str | None = typer.Option(
        None,
        "--model",
        "-m",
        help="Model identifier (overrides DEEPSEEK_MODEL)"
    ),
    temperature: float | None = typer.Option(
        None,
        "--temperature",
        "-t",
        help="Sampling temperature between 0.0 and 2.0"
    ),
    max_tokens: int | None = typer.Option(
        None,
        "--max-tokens",
        help="Maximum tokens per reply"
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        help="Request timeout in seconds"
    ),
    system: str | None = typer.Option(
        None,
        "--system",
        "-s",
        help="System prompt for the conversation (empty string disables it)"
    ),
    stream: bool | None = typer.Option(
        None,
        "--stream/--no-stream",
        help="Print the reply as it is generated (overrides DEEPSEEK_STREAM)"
    ),
    markdown: bool = typer.Option(
        True,
        "--markdown/--plain",
        help="Render replies as Markdown"
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        "-e",
        help="Load settings from this .env file"
    ),
):
    """Start an interactive chat session."""
    _chat(
        env_file=env_file,
        model=model,
        temperature=temperature,
        max_tokens=max_tokens,
        timeout=timeout,
        system=system,
        stream=stream,
        markdown=markdown,
    )


@app.command()
def check(
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        "-e",
        help="Load settings from this .env file"
    ),
):
    """Validate the configuration and show the effective settings."""
    config = _load(env_file)

    table = Table(show_header=False, box=None)
    table.add_column("Setting", style="bold cyan", width=15)
    table.add_column("Value")

    table.add_row("API Key", config.masked_api_key)
    table.add_row("API Base", config.api_base)
    table.add_row("Model", config.model)
    table.add_row("Max Tokens", str(config.max_tokens))
    table.add_row("Temperature", f"{config.temperature:g}")
    table.add_row("Timeout", f"{config.timeout:g}s")
    table.add_row("History Limit", str(config.history_limit or "unbounded"))
    table.add_row("Stream", "yes" if config.stream else "no")
    table.add_row("System Prompt", "set" if config.system_prompt.strip() else "none")

    console.print(table)
    console.print("[green]+[/green] Configuration: OK")


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
