# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.21
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/rbs/cli/prompts.py

"""Interactive Chooser backed by typer prompts."""

from typing import Optional, Sequence

import typer
from rich.console import Console


def parse_choices(text: str, count: int) -> Optional[list[int]]:
    """Parse "1,3, 4" into zero-based indices; None if anything is out of range."""
    indices = []
    for part in text.replace(" ", "").split(","):
        if not part:
            continue
        if not part.isdigit():
            return None
        number = int(part)
        if not 1 <= number <= count:
            return None
        if number - 1 not in indices:
            indices.append(number - 1)
    return indices


class TyperChooser:
    """Numbered menus on the console, answers read with typer.prompt."""

    def __init__(self, console: Console) -> None:
        self.console = console

    def _show(self, prompt: str, options: Sequence[str]) -> None:
        self.console.print(f"\n[bold]{prompt}[/bold]")
        for number, option in enumerate(options, start=1):
            self.console.print(f"  [cyan]{number}[/cyan]) {option}", highlight=False)

    def choose(self, prompt: str, options: Sequence[str], default: int = 0) -> int:
        self._show(prompt, options)
        while True:
            answer = typer.prompt("Enter choice", default=default + 1, type=int)
            if 1 <= answer <= len(options):
                return answer - 1
            self.console.print(f"[red]✗[/red] Please enter a number between 1 and {len(options)}")

    def choose_many(self, prompt: str, options: Sequence[str]) -> list[int]:
        self._show(prompt, options)
        while True:
            answer = typer.prompt("Enter numbers separated by commas (e.g. 1,3,4)", default="", show_default=False)
            indices = parse_choices(answer, len(options))
            if indices is not None:
                return indices
            self.console.print(f"[red]✗[/red] Invalid selection: use numbers between 1 and {len(options)}")

    def confirm(self, prompt: str, default: bool = False) -> bool:
        return typer.confirm(prompt, default=default)
