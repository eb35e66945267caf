"""Console output for create-digitaltwin.

One shared Rich ``console`` carries every user-facing line: the CLI banner
and summary, the generator's progress, and degraded version lookups.  Message
text is escaped before styling, so project names and paths containing square
brackets print literally.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

console = Console()


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


def print_banner(title: str, subtitle: str = "") -> None:
    """Print the boxed heading shown when the CLI starts."""
    body = f"[bold blue]{escape(title)}[/bold blue]"
    if subtitle:
        body += f"\n[dim]{escape(subtitle)}[/dim]"
    console.print(Panel(body, expand=False))


def print_summary_table(data: Mapping[str, object], title: str = "Configuration") -> None:
    """Print the chosen options as a two-column table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Option", style="dim", no_wrap=True)
    table.add_column("Choice")
    for option, choice in data.items():
        table.add_row(escape(option), escape(str(choice)))
    console.print(table)
    console.print()


def print_created_files(paths: Iterable[str]) -> None:
    for path in paths:
        console.print(f"  [green]+[/green] {escape(path)}")


def print_next_steps(commands: Iterable[tuple[str, str]]) -> None:
    """Print ``(command, hint)`` pairs as an aligned checklist."""
    commands = list(commands)
    width = max((len(command) for command, _ in commands), default=0)
    console.print("\n[cyan]Next steps:[/cyan]")
    for command, hint in commands:
        line = f"  {escape(command.ljust(width))}"
        if hint:
            line += f"  [dim]# {escape(hint)}[/dim]"
        console.print(line)


# ---------------------------------------------------------------------------
# One-line messages
# ---------------------------------------------------------------------------


def print_success(message: str) -> None:
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str) -> None:
    console.print(f"[bold red]{escape(message)}[/bold red]")


def print_warning(message: str) -> None:
    console.print(f"[yellow]{escape(message)}[/yellow]")


def print_info(message: str) -> None:
    console.print(f"[blue]{escape(message)}[/blue]")
