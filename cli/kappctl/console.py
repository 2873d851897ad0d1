from __future__ import annotations

from rich.console import Console
from rich.markup import escape

# names and server text may contain ":x:" style codes; print them as sent
console = Console(emoji=False)
err_console = Console(stderr=True, emoji=False)


def ok(msg: str) -> None:
    console.print(escape(msg), soft_wrap=True)


def err(msg: str) -> None:
    err_console.print(f"[bold red]Error:[/] {escape(msg)}", soft_wrap=True)


def raw(text: str) -> None:
    """Print text untouched: no markup, emoji codes, highlighting or wrapping."""
    console.print(text, markup=False, emoji=False, highlight=False, soft_wrap=True)


def print(*args, **kwargs):
    """Proxy to underlying rich Console.print()."""
    console.print(*args, **kwargs)
