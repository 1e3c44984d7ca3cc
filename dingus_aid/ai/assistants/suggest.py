import sys

from dataclasses import dataclass
from typing import Callable, Optional

from rich.console import Console
from rich.markup import escape

from ...config import Settings
from ...dispatch import ExecutionResult, copy_to_clipboard, execute
from ...errors import ClipboardError, CommandExecutionError
from ..agent import Agent
from ..history import History
from ..prompt import SYSTEM_PROMPT, build_prompt


CONFIRM_PROMPT = "Do you want to run this command? (y/n/c - 'c' to copy to clipboard): "


@dataclass
class Suggestion:
    """A command suggested by the model, with the tokens it cost to get it."""

    command: str
    prompt_tokens: int = 0
    completion_tokens: int = 0

    def cost(self, settings: Settings) -> float:
        """Estimated price in USD; the rates in `settings` are per million tokens."""
        return (
            self.prompt_tokens * settings.input_token_cost
            + self.completion_tokens * settings.output_token_cost
        ) / 1_000_000


def suggest(settings: Settings, prompt: str) -> Suggestion:
    agent = Agent(settings, SYSTEM_PROMPT)
    response = agent.run(prompt)
    return Suggestion(
        command=response.content.strip(),
        prompt_tokens=response.prompt_tokens,
        completion_tokens=response.completion_tokens,
    )


def _run(console: Console, command: str) -> ExecutionResult:
    result = execute(command)
    try:
        result.check_returncode()
    except CommandExecutionError as e:
        console.print(f"[bold red]Command returned error:[/] {e}")
        console.print("[bold]Output:[/]")
    else:
        console.print("\n[bold]Command output:[/]")
    console.out(result.output, highlight=False)
    return result


def _copy(console: Console, command: str):
    try:
        copy_to_clipboard(command)
    except (ClipboardError, OSError) as e:
        console.print(f"[red]Could not copy to clipboard:[/] {escape(str(e))}")
    else:
        console.print("[green]Command copied to clipboard![/]\n")


def do(
    settings: Settings,
    query: str,
    history: History,
    ask_input: Callable[[str], str] = input,
) -> Optional[ExecutionResult]:
    """
    Suggests a command for `query`, asks the user what to do with it and does it.

    Only a command that was actually run is recorded in `history`; its result is
    returned so the caller can persist the session. Anything else returns None.
    """
    console = Console()

    suggestion = suggest(settings, build_prompt(query, history.context()))
    if not suggestion.command:
        print("Could not generate a command for the given prompt.", file=sys.stderr)
        sys.exit(1)

    console.print(
        f"\n[bold yellow]Suggested command:[/] [bold cyan]{escape(suggestion.command)}[/]\n"
    )
    console.print(f"[magenta]Query cost: ${suggestion.cost(settings):.6f}[/]\n")

    try:
        confirm = ask_input(CONFIRM_PROMPT).strip().lower()
    except (KeyboardInterrupt, EOFError):
        sys.exit(0)

    if confirm == "y":
        result = _run(console, suggestion.command)
        history.add(query, result.output)
        return result

    if confirm == "c":
        _copy(console, suggestion.command)

    console.print("Command not executed.")
    return None
