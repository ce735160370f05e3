"""Terminal output for the interactive session."""

import textwrap
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt
from rich.status import Status

from ..entities import RemoteRun

console = Console(highlight=False)

ICO_RES = "[bold cyan]➤[/]"
ICO_CHECK = "[green]✔[/]"
ICO_UPLOADED = "[green]↥[/]"
ICO_ERR = "[red]✗[/]"

WRAP_WIDTH = 80


def prompt(text: str) -> str:
    return Prompt.ask(f"[bold cyan]?[/] [cyan]{text}[/]", console=console)


def print_check(message: str) -> None:
    console.print(f"{ICO_CHECK} {escape(message)}")


def print_uploaded(count: int) -> None:
    console.print(f"{ICO_UPLOADED} {count} file bundle(s) uploaded")


def print_error(err: Any) -> None:
    console.print(f"{ICO_ERR} [red]{escape(str(err))}[/]")


def print_reply(text: str) -> None:
    wrapped = "\n".join(textwrap.fill(paragraph, WRAP_WIDTH) if paragraph else "" for paragraph in text.splitlines())
    console.print(f"{ICO_RES} ", end="")
    console.print(wrapped, style="bold", markup=False)


class RunStatusDisplay:
    """Spinner shown while a run is polled; each poll updates its text."""

    def __init__(self) -> None:
        self._status: Optional[Status] = None

    def __enter__(self) -> "RunStatusDisplay":
        self._status = console.status("Waiting for the assistant...")
        self._status.start()
        return self

    def __exit__(self, *exc: Any) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None

    def __call__(self, run: RemoteRun) -> None:
        if self._status is not None:
            self._status.update(f"Run {run.status}...")
