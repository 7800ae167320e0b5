"""Terminal output handling using Rich library.

This module provides the OutputHandler class for all CLI terminal output.
Uses Rich for spinners, colored output and formatted summaries. Supports
verbosity levels and the --no-color flag.
"""

from contextlib import contextmanager
from typing import Iterator, List

from rich.console import Console
from rich.live import Live
from rich.spinner import Spinner


class OutputHandler:
    """Handles all terminal output using Rich library.

    Attributes:
        verbosity: Output verbosity level (0=summary, 1=info, 2=debug)
        console: Rich Console instance for output

    Example:
        >>> handler = OutputHandler(verbosity=1, no_color=False)
        >>> handler.success("Operation completed")
        >>> with handler.spinner("Publishing..."):
        ...     pass
    """

    def __init__(self, verbosity: int = 0, no_color: bool = False):
        """Initialize output handler.

        Args:
            verbosity: Verbosity level (0=summary, 1=info, 2=debug)
            no_color: Disable color output if True
        """
        self.verbosity = verbosity
        self.console = Console(
            force_terminal=not no_color,
            no_color=no_color,
            highlight=False,
        )

    def success(self, message: str) -> None:
        """Display success message in green."""
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        """Display error message in red."""
        self.console.print(f"[red]✗[/red] {message}", style="red")

    def warning(self, message: str) -> None:
        """Display warning message in yellow."""
        self.console.print(f"[yellow]⚠[/yellow] {message}", style="yellow")

    def info(self, message: str) -> None:
        """Display info message (only if verbosity >= 1)."""
        if self.verbosity >= 1:
            self.console.print(message)

    def debug(self, message: str) -> None:
        """Display debug message (only if verbosity >= 2)."""
        if self.verbosity >= 2:
            self.console.print(f"[dim]{message}[/dim]")

    def print(self, message: str) -> None:
        """Display message without formatting."""
        self.console.print(message, markup=False)

    @contextmanager
    def spinner(self, message: str) -> Iterator[None]:
        """Display spinner while a blocking operation runs.

        Args:
            message: Message to display with spinner

        Example:
            >>> with handler.spinner("Publishing to Confluence..."):
            ...     publisher.run()
        """
        spinner = Spinner("dots", text=message)
        with Live(spinner, console=self.console, refresh_per_second=10, transient=True):
            yield

    def print_publish_output(self, stdout: str, stderr: str) -> None:
        """Display captured publisher output verbatim."""
        if stdout:
            self.console.print("\n[bold]Publisher output:[/bold]")
            self.console.print(stdout, markup=False, highlight=False)
        if stderr:
            self.console.print("\n[bold red]Publisher errors:[/bold red]")
            self.console.print(stderr, markup=False, highlight=False)

    def print_publish_summary(
        self,
        passes: int,
        new_pages: List[str],
        links_resolved: List[int],
        late_pages: List[str],
    ) -> None:
        """Display publish run summary with color coding.

        Args:
            passes: Number of publish passes run
            new_pages: Documents that received a page ID during the run
            links_resolved: Links rewritten per mirror build
            late_pages: Documents whose ID only appeared in the second pass
        """
        self.console.print("\n[bold]Publish Summary:[/bold]")
        self.console.print(f"  [blue]↑[/blue] Publish passes: {passes}")

        if new_pages:
            self.console.print(f"  [green]+[/green] New pages: {len(new_pages)}")
            for path in new_pages:
                self.console.print(f"    • {path}")

        if links_resolved:
            self.console.print(f"  [green]↔[/green] Links resolved: {links_resolved[-1]}")

        if late_pages:
            self.console.print(
                f"  [yellow]⚠[/yellow] Links to {len(late_pages)} page(s) resolve on the next run:"
            )
            for path in late_pages:
                self.console.print(f"    • {path}")

        self.console.print("\n[green]All changes have been published to Confluence[/green]")
