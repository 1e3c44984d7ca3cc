#!/usr/bin/env python3

import argparse
import argcomplete
import sys

from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import wraps
from typing import Callable, List, Optional

from rich.console import Console

from .ai import SessionStore, do
from .config import CredentialStore, Settings
from .errors import CredentialMissing


_available_commands: List["Command"] = []

# Anything that is not a registered command name is a query for this one.
DEFAULT_COMMAND = "ask"

USAGE = """Usage:
  dingus-aid <query>     - Get command suggestion
  dingus-aid cleanup     - Remove all configuration files"""


@dataclass
class Argument(ABC):
    def __init__(self, help: str, kwargs: Optional[dict] = None):
        self.help = help
        self.kwargs = kwargs if kwargs is not None else {}

    @abstractmethod
    def add_to_parser(self, parser: argparse.ArgumentParser):
        pass


class PositionalArg(Argument):
    def __init__(self, name: str, help: str, kwargs: Optional[dict] = None):
        super().__init__(help=help, kwargs=kwargs)
        self.name = name

    def add_to_parser(self, parser: argparse.ArgumentParser):
        parser.add_argument(self.name, help=self.help, **self.kwargs)


@dataclass
class Command:
    name: str
    func: Callable
    help: str
    description: str
    args: list[Argument]


def command(args: List[Argument]):
    def decorator(func):
        if not func.__name__.startswith("handle_"):
            raise ValueError("Command handler must start with 'handle_'.")

        if not func.__doc__:
            raise ValueError(
                f"Command handler '{func.__name__}' must have a docstring for its help text."
            )

        @wraps(func)
        def wrapper(parsed_args):
            # One Settings object per invocation, handed to the handler explicitly.
            return func(parsed_args, Settings.from_env())

        command_name = func.__name__.split("_")[1]
        help_text = func.__doc__.strip().split("\n")[0]
        _available_commands.append(
            Command(command_name, wrapper, help_text, func.__doc__, args)
        )
        return wrapper

    return decorator


def _ensure_credential(settings: Settings, ask_input: Callable[[str], str] = input):
    """Loads the API key into `settings`, asking for it and saving it on first use."""
    store = CredentialStore(settings)
    try:
        settings.api_key = store.require()
        return
    except CredentialMissing:
        pass

    api_key = ask_input("Enter your OpenAI API Key: ").strip()
    if not api_key:
        raise CredentialMissing("an OpenAI API key is required")

    store.save(api_key)
    settings.api_key = api_key
    print("API key saved.")


##############################################################################


@command([])
def handle_cleanup(args, settings: Settings):
    """Remove all configuration files, including the API key and session history."""
    CredentialStore(settings).erase()
    Console().print("[green]Configuration files removed successfully![/]")


@command(
    [
        PositionalArg(
            name="query",
            help="The natural language text to translate into a shell command.",
            kwargs={"nargs": "+"},
        )
    ]
)
def handle_ask(args, settings: Settings):
    """Suggest a shell command for a natural language query, then run or copy it."""
    query = " ".join(args.query)
    _ensure_credential(settings)

    session = SessionStore(settings.history_file)
    history = session.load(settings.history_size, settings.history_words)

    if do(settings, query, history) is not None:
        session.save(history)


##############################################################################


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dingus-aid",
        description="Turn a natural language request into a shell command.",
    )
    subparsers = parser.add_subparsers(
        dest="command", help="Sub-commands", required=True
    )

    # Sort commands alphabetically for consistent --help output.
    _available_commands.sort(key=lambda cmd: cmd.name)

    for command in _available_commands:
        subparser = subparsers.add_parser(
            command.name, help=command.help, description=command.description
        )
        for arg in command.args:
            arg.add_to_parser(subparser)
        subparser.set_defaults(func=command.func)

    return parser


def _route(argv: List[str]) -> List[str]:
    """Sends everything that is not a reserved command name to the query handler."""
    reserved = {cmd.name for cmd in _available_commands if cmd.name != DEFAULT_COMMAND}
    if argv[0] in ("-h", "--help"):
        return argv
    if argv[0] in reserved:
        # Reserved commands take no arguments; trailing words are ignored.
        return argv[:1]
    # `--` keeps query words such as `-la` from being read as options.
    return [DEFAULT_COMMAND, "--", *argv]


def run_cli(argv: Optional[List[str]] = None):
    """
    Parses command-line arguments and executes the corresponding command.

    Args:
        argv: A list of strings representing the command-line arguments.
              If None, `sys.argv[1:]` is used.
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = _build_parser()

    # Enable argument auto-completion.
    argcomplete.autocomplete(parser)

    if not argv:
        print(USAGE)
        sys.exit(1)

    args = parser.parse_args(_route(argv))
    try:
        args.func(args)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def main():
    """The main entry point for the command-line interface, called by the `dingus-aid` script."""
    run_cli()


if __name__ == "__main__":
    main()
