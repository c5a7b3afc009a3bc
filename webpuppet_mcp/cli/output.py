"""Rich-based output utilities for the webpuppet-mcp CLI.

stdout is reserved for protocol messages, so the console writes to stderr.
"""

from rich.console import Console
from rich.markup import escape

# Shared console instance
console = Console(stderr=True)


def print_error(message: str) -> None:
    """Print an error message in red.

    Args:
        message: The error message to display. Markup in it is escaped.
    """
    console.print(f"[bold red]Error:[/bold red] {escape(message)}", highlight=False)
