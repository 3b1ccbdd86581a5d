"""Terminal rendering for the interactive chat.

Hides how output is styled; callers only say what kind of line it is.
"""

from collections.abc import Iterator
from contextlib import contextmanager

from rich.console import Console
from rich.markdown import Markdown
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from ..config import ChatConfig
from ..history import ConversationHistory

RULE_WIDTH = 60

# Command token -> description, in display order
COMMAND_HELP = (
    ("/help", "Show this help message"),
    ("/clear", "Clear conversation history"),
    ("/history", "Show conversation history"),
    ("/exit", "Exit the application (also /quit or Ctrl+C)"),
)


class ChatConsole:
    """Rich-based renderer for the chat loop."""

    def __init__(self, console: Console | None = None, markdown: bool = True):
        self.console = console or Console()
        self._markdown = markdown

    def input(self) -> str:
        """Prompt for one line of input.

        Raises:
            EOFError: On end of input
            KeyboardInterrupt: On Ctrl+C
        """
        return self.console.input("[bold yellow]You:[/bold yellow] ").strip()

    def print_welcome(self, config: ChatConfig) -> None:
        self.console.print(Rule(style="cyan"), width=RULE_WIDTH)
        self.console.print("[bold green]DeepChat Console[/bold green]")
        self.console.print(Rule(style="cyan"), width=RULE_WIDTH)
        self.console.print(f"[dim]Model: {config.model} @ {config.api_base}[/dim]")
        self.console.print("Type your message and press Enter to chat.")
        self.console.print("[yellow]Special commands:[/yellow]")
        for token, description in COMMAND_HELP:
            self.console.print(f"  [bright_yellow]{token}[/bright_yellow] - {description}")
        self.console.print()

    def print_help(self) -> None:
        table = Table(show_header=False, box=None)
        table.add_column("Command", style="bright_yellow", width=10)
        table.add_column("Description")
        for token, description in COMMAND_HELP:
            table.add_row(token, description)

        self.console.print("[bold cyan]Available Commands:[/bold cyan]")
        self.console.print(table)
        self.console.print()
        self.console.print("[bold cyan]Tips:[/bold cyan]")
        self.console.print("  - Press Ctrl+C while waiting for a reply to cancel it")
        self.console.print("  - Your conversation history is kept for the whole session")
        self.console.print("  - Use clear, specific questions for better responses")
        self.console.print()

    def print_history(self, history: ConversationHistory) -> None:
        if not len(history):
            self.print_info("No conversation history yet.")
            return

        self.console.print("[bold cyan]Conversation History:[/bold cyan]")
        self.console.print(Text(history.render()))
        self.console.print()

    def print_assistant_message(self, content: str) -> None:
        self.console.print("[bold green]Assistant:[/bold green]")
        if self._markdown:
            self.console.print(Markdown(content))
        else:
            self.console.print(Text(content))
        self.console.print()

    def start_stream(self) -> None:
        self.console.print("[bold green]Assistant:[/bold green]")

    def print_chunk(self, chunk: str) -> None:
        self.console.print(Text(chunk), end="")

    def end_stream(self) -> None:
        self.console.print()
        self.console.print()

    def print_error(self, error: str) -> None:
        self.console.print(Text.assemble(("Error: ", "bold red"), (error, "red")))

    def print_info(self, info: str) -> None:
        self.console.print(Text.assemble(("Info: ", "bold cyan"), (info, "cyan")))

    def print_warning(self, warning: str) -> None:
        self.console.print(Text.assemble(("Warning: ", "bold yellow"), (warning, "yellow")))

    @contextmanager
    def thinking(self) -> Iterator[None]:
        """Show a spinner while waiting for a reply."""
        with self.console.status("[yellow]Thinking...[/yellow]", spinner="dots"):
            yield

    def print_goodbye(self) -> None:
        self.console.print()
        self.console.print("[green]Thank you for using DeepChat! Goodbye![/green]")
