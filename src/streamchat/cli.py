"""Interactive CLI for streamchat."""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Any

import click
from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory
from rich.console import Console
from rich.markup import escape as escape_markup
from rich.table import Table

from streamchat.config import StreamChatConfig, load_config
from streamchat.errors import (
    EmptyHistoryError,
    FileFormatError,
    NotFoundError,
    ProviderError,
    TransportError,
)
from streamchat.llm.client import LLMClient
from streamchat.llm.dispatcher import Channel, ProviderVariant, StreamToken
from streamchat.llm.providers import PROVIDERS, create_client
from streamchat.llm.transport import HttpTransport

console = Console()


class TokenDisplay:
    """Renders streamed tokens, with a header whenever the channel changes."""

    def __init__(self, con: Console):
        self.con = con
        self._channel: Channel | None = None

    def __call__(self, token: StreamToken) -> None:
        if token.channel is not self._channel:
            if token.channel is Channel.REASONING:
                self.con.print("\n[bold dim]Reasoning:[/bold dim]")
            elif self._channel is Channel.REASONING:
                self.con.print("\n\n[bold]Answer:[/bold]")
            self._channel = token.channel
        style = "dim italic" if token.channel is Channel.REASONING else None
        self.con.print(token.text, end="", style=style, markup=False, highlight=False)

    def reset(self) -> None:
        self._channel = None


def _setting_literal(value: Any) -> tuple[str, bool]:
    """Config value -> (text, quote)."""
    if isinstance(value, bool):
        return ("true" if value else "false"), False
    if isinstance(value, (int, float)):
        return str(value), False
    return str(value), True


def build_client(
    config: StreamChatConfig, provider: str, display: TokenDisplay,
) -> LLMClient:
    """Create the client for *provider* and apply the config's settings."""
    client = create_client(
        provider,
        config.resolve_api_key(provider),
        display,
        transport=HttpTransport(timeout=config.timeout),
        caller_encoding=config.caller_encoding,
        wire_encoding=config.wire_encoding,
        providers=config.providers,
    )
    if config.system_prompt:
        client.set_system(config.system_prompt)
    if config.temperature is not None:
        client.set_temperature(config.temperature)
    for name, value in config.settings.items():
        text, quote = _setting_literal(value)
        client.set(name, text, quote)
    return client


def _show_turn(index: int, question: str, answer: str) -> None:
    console.print(f"[bold cyan]#{index} user[/bold cyan]")
    console.print(question, markup=False, highlight=False)
    console.print("[bold green]assistant[/bold green]")
    console.print(answer, markup=False, highlight=False)


def _show_history(client: LLMClient, arg: str) -> None:
    if arg.startswith("#") and arg[1:].isdigit():
        index = int(arg[1:])
        turn = client.get_history_turn(index)
        _show_turn(index, turn.question, turn.answer)
        return
    if arg:
        console.print(client.get_history(arg), markup=False, highlight=False)
        return
    if not len(client.history):
        raise EmptyHistoryError("history is empty")
    if client.history.system_prompt:
        console.print(f"[dim]system: {client.history.system_prompt}[/dim]", highlight=False)
    for i, turn in enumerate(client.history):
        _show_turn(i, turn.question, turn.answer)


def handle_command(cmd: str, client: LLMClient) -> bool | str:
    """Handle a slash command.

    Returns ``"quit"`` to leave the REPL, True if handled, False otherwise.
    """
    parts = cmd.strip().split(maxsplit=1)
    command = parts[0].lower()
    arg = parts[1].strip() if len(parts) > 1 else ""

    if command in ("/quit", "/exit", "/q"):
        return "quit"

    elif command == "/system":
        client.set_system(arg)
        console.print("[green]System prompt updated.[/green]" if arg
                      else "[green]System prompt cleared.[/green]")
        return True

    elif command == "/temperature":
        if not arg:
            t = client.settings.temperature
            console.print(f"Temperature: {t if t is not None else 'provider default'}")
            return True
        try:
            client.set_temperature(float(arg))
        except ValueError:
            console.print(f"[red]Not a number: {arg}[/red]")
            return True
        if not client.settings.temperature_in_range:
            console.print("[yellow]Outside [0, 2]; it will not be sent.[/yellow]")
        else:
            console.print(f"[green]Temperature set to {arg}[/green]")
        return True

    elif command == "/model":
        if arg:
            client.set_model(arg)
            console.print(f"[green]Model set to {arg}[/green]")
        else:
            console.print(f"Model: {client.provider.model}")
        return True

    elif command == "/set":
        fields = arg.split(maxsplit=2)
        if len(fields) < 2:
            console.print("[red]Usage: /set <name> <value> \\[quote][/red]")
            return True
        quote = len(fields) == 3 and fields[2].lower() in ("quote", "quoted", "q")
        try:
            client.set(fields[0], fields[1], quote)
        except ValueError as e:
            console.print(f"[red]{e}[/red]")
            return True
        shown = "********" if fields[0] == "key" else fields[1]
        console.print(f"[green]{fields[0]} = {escape_markup(shown)}[/green]", highlight=False)
        return True

    elif command == "/history":
        try:
            _show_history(client, arg)
        except EmptyHistoryError:
            console.print("[dim]No history yet.[/dim]")
        except NotFoundError as e:
            console.print(f"[red]Not found: {e}[/red]")
        return True

    elif command == "/reasoning":
        if client.variant is not ProviderVariant.REASONER:
            console.print("[dim]This provider does not stream reasoning.[/dim]")
        else:
            reasoning = client.remembered_reasoning()
            if reasoning:
                console.print(reasoning, markup=False, highlight=False)
            else:
                console.print("[dim]No reasoning recorded yet.[/dim]")
        return True

    elif command == "/clear":
        client.clear_history()
        console.print("[green]History cleared.[/green]")
        return True

    elif command == "/load":
        if not arg:
            console.print("[red]Usage: /load <file>[/red]")
            return True
        try:
            client.read_file(arg)
        except NotFoundError:
            console.print(f"[red]File not found: {arg}[/red]")
        except FileFormatError as e:
            console.print(f"[red]Malformed history file (line {e.line_number}): {e}[/red]")
        else:
            console.print(f"[green]Loaded {len(client.history)} turns.[/green]")
        return True

    elif command == "/save":
        if not arg:
            console.print("[red]Usage: /save <file>[/red]")
            return True
        if client.save_file(arg):
            console.print(f"[green]Saved {len(client.history)} turns to {arg}[/green]")
        else:
            console.print(f"[red]Could not write {arg}[/red]")
        return True

    elif command == "/providers":
        table = Table(title="Providers", show_lines=False, border_style="dim")
        table.add_column("Name", style="bold")
        table.add_column("Model")
        table.add_column("Kind", width=9)
        table.add_column("Description")
        for spec in PROVIDERS.values():
            table.add_row(spec.name, spec.model, spec.variant.value, spec.description)
        console.print(table)
        return True

    elif command == "/help":
        console.print("""
[bold]Conversation:[/bold]
  <text>                   - Ask a question (streams the answer)
  /history \\[question|#n]   - Show history, an answer, or turn n
  /reasoning               - Show the last reasoning trace (reasoning models)
  /clear                   - Clear conversation history
  /load <file>             - Load history from a file
  /save <file>             - Save history to a file

[bold]Settings:[/bold]
  /system <text>           - Set the system prompt (empty clears it)
  /temperature \\[t]         - Show or set temperature (0-2)
  /model \\[name]            - Show or set the model
  /set <name> <value> \\[quote] - Set a request property
  /providers               - List built-in providers
  /quit                    - Exit
        """)
        return True

    return False


def ask(client: LLMClient, display: TokenDisplay, question: str) -> bool:
    """Submit one question, reporting failures on the console."""
    display.reset()
    start = time.monotonic()
    try:
        client.get(question)
    except TransportError as e:
        console.print(f"\n[red]Network error, check your connection and retry: {escape_markup(str(e))}[/red]")
        return False
    except ProviderError as e:
        console.print(f"\n[red]Provider error:[/red] {escape_markup(e.raw)}", highlight=False)
        return False
    console.print(f"\n[dim]({time.monotonic() - start:.1f}s)[/dim]\n")
    return True


@click.command()
@click.option("--config", "-c", "config_path", default=None,
              help="Path to streamchat.yaml (auto-detected from CWD or ~/.streamchat/)")
@click.option("--provider", "-p", default=None, help="Provider name (see /providers)")
@click.option("--history", "-H", "history_path", default=None,
              help="History file to load at start and save on exit")
@click.option("--question", "-q", default=None, help="Ask one question and exit")
@click.option("--verbose", "-v", is_flag=True, help="Verbose logging")
def main(config_path: str | None, provider: str | None, history_path: str | None,
         question: str | None, verbose: bool):
    """streamchat - stream answers from remote chat models."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)

    config, config_file = load_config(config_path)
    provider = provider or config.provider
    history_path = history_path or config.history_file

    display = TokenDisplay(console)
    try:
        client = build_client(config, provider, display)
    except NotFoundError as e:
        raise click.ClickException(str(e)) from e
    if not client.provider.api_key:
        console.print(f"[yellow]No API key configured for {provider}.[/yellow]")

    if history_path and Path(history_path).expanduser().exists():
        try:
            client.read_file(history_path)
        except FileFormatError as e:
            raise click.ClickException(
                f"Malformed history file {history_path} (line {e.line_number}): {e}") from e

    if question:
        ok = ask(client, display, question)
        if ok and history_path:
            client.save_file(history_path)
        raise SystemExit(0 if ok else 1)

    console.print(f"[bold]streamchat[/bold] [dim]{provider} ({client.provider.model})[/dim]")
    if config_file:
        console.print(f"[dim]Config: {config_file}[/dim]")
    console.print("[dim]Type /help for commands.[/dim]\n")

    prompt_history = Path(os.path.expanduser("~/.streamchat/prompt_history"))
    prompt_history.parent.mkdir(parents=True, exist_ok=True)
    session = PromptSession(history=FileHistory(str(prompt_history)))

    try:
        while True:
            try:
                user_input = session.prompt("> ").strip()
            except (EOFError, KeyboardInterrupt):
                console.print("\n[dim]Goodbye![/dim]")
                break

            if not user_input:
                continue

            if user_input.startswith("/"):
                result = handle_command(user_input, client)
                if result == "quit":
                    console.print("[dim]Goodbye![/dim]")
                    break
                if result:
                    continue

            ask(client, display, user_input)
    finally:
        if history_path:
            client.save_file(history_path)


if __name__ == "__main__":
    main()
