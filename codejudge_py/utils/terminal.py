"""Rich console helpers shared by the CLI commands."""

from typing import Optional, Sequence

from rich.console import Console
from rich.table import Table

console = Console()

# Judge statuses (job, test and submission) to rich styles.
STATUS_STYLES = {
    "accepted": "green",
    "done": "green",
    "partially accepted": "yellow",
    "runtime error": "yellow",
    "rejected": "red",
    "failed": "red",
    "compile error": "red",
    "queued": "cyan",
    "running": "cyan",
}


def choose_index(prompt: str, options: Sequence, max_attempts: int = 3) -> Optional[int]:
    """Ask for an index into ``options``; None after bad input or cancel."""
    last = len(options) - 1
    for _ in range(max_attempts):
        try:
            idx = int(input(f"{prompt} (0-{last}): "))
        except ValueError:
            console.print("[red]Not a number[/red]")
            continue
        except (KeyboardInterrupt, EOFError):
            console.print("\n[yellow]Cancelled[/yellow]")
            return None
        if 0 <= idx <= last:
            return idx
        console.print(f"[red]Pick a number from 0 to {last}[/red]")

    console.print("[red]Giving up after too many invalid answers[/red]")
    return None


def create_table(title: Optional[str], headers: Sequence[str]) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    for header in headers:
        table.add_column(header)
    return table


def format_result_color(status: str) -> str:
    """Wrap a judge status in rich markup for its colour."""
    style = STATUS_STYLES.get(status.lower())
    return f"[{style}]{status}[/{style}]" if style else status
