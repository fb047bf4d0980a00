"""
Progress monitoring and user interface.
Single responsibility: provide user feedback during a comparison run.
"""

import sys
import time
from contextlib import contextmanager
from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..core.aggregator import ComparisonResult


class ProgressMonitor:
    """
    Simple progress monitoring for console output.
    """

    def __init__(self, verbose: bool = True, stream=None):
        """
        Initialize progress monitor.

        Args:
            verbose: Whether to show detailed progress
            stream: Output stream (stdout by default)
        """
        self.verbose = verbose
        self.stream = stream or sys.stdout
        self.current_task = None
        self.start_time = None

    def _print(self, message: str = "", file=None):
        print(message, file=file or self.stream)

    def start_task(self, task_name: str):
        """
        Start a new task.

        Args:
            task_name: Name of task
        """
        self.current_task = task_name
        self.start_time = time.time()

        if self.verbose:
            self._print(f"[START] {task_name}")

    def complete_task(self, message: Optional[str] = None):
        """
        Mark current task as complete.

        Args:
            message: Optional completion message
        """
        if self.verbose and self.current_task:
            elapsed = time.time() - self.start_time
            status = f"[DONE] {self.current_task} - Time: {self._format_time(elapsed)}"
            if message:
                status += f" - {message}"
            self._print(status)

        self.current_task = None
        self.start_time = None

    @contextmanager
    def task(self, task_name: str):
        """
        Context manager for task progress.

        Example:
            with progress.task("Comparing tables"):
                results = comparator.compare_all()
        """
        self.start_task(task_name)
        try:
            yield self
        finally:
            self.complete_task()

    def info(self, message: str):
        """Show info message."""
        if self.verbose:
            self._print(f"[INFO] {message}")

    def warning(self, message: str):
        """Show warning message, whatever the verbosity."""
        self._print(f"[WARN] {message}")

    def error(self, message: str):
        """Show error message."""
        self._print(f"[ERROR] {message}", file=sys.stderr)

    def show_results(self, results: Sequence[ComparisonResult]):
        """
        Print one summary block per table.

        Args:
            results: Per-table comparison results
        """
        for result in results:
            self._print("=" * 60)
            self._print(f"Sheet '{result.table_name}' Summary:")
            self._print(f"  Key Column: {result.key_display}")
            self._print(f"  Row Count: {result.row_count_1} vs {result.row_count_2}")
            self._print(f"  New Records: {len(result.new_records)}")
            self._print(f"  Deleted Records: {len(result.deleted_records)}")
            self._print(f"  Modified Records: {len(result.modified_records)}")
            self._print(f"  Duplicates in File1: {len(result.duplicates_1)}")
            self._print(f"  Duplicates in File2: {len(result.duplicates_2)}")
        self._print("=" * 60)

    def _format_time(self, seconds: float) -> str:
        """
        Format time duration.

        Args:
            seconds: Time in seconds

        Returns:
            Formatted time string
        """
        if seconds < 60:
            return f"{seconds:.1f}s"
        elif seconds < 3600:
            return f"{seconds / 60:.1f}m"
        else:
            return f"{seconds / 3600:.1f}h"


class RichProgressMonitor:
    """
    Progress monitoring using the Rich library.
    """

    def __init__(self, console: Optional[Console] = None):
        """
        Initialize Rich progress monitor.

        Args:
            console: Console to render to (a new one when omitted)
        """
        self.console = console or Console()

    @contextmanager
    def task(self, task_name: str):
        """Show a spinner while the task runs."""
        start = time.time()
        with self.console.status(f"[bold blue]{task_name}"):
            yield self
        self.console.print(f"[green]✓[/green] {task_name} "
                           f"[dim]({time.time() - start:.1f}s)[/dim]")

    def info(self, message: str):
        self.console.print(message)

    def warning(self, message: str):
        self.console.print(f"[bold yellow]! {message}[/bold yellow]")

    def error(self, message: str):
        self.console.print(f"[bold red]✗ {message}[/bold red]")

    def show_results(self, results: Sequence[ComparisonResult]):
        """
        Display comparison results in a formatted table.

        Args:
            results: Per-table comparison results
        """
        self.console.print(Panel(
            Text("Comparison Results", justify="center", style="bold cyan"),
            box=box.DOUBLE,
            style="cyan",
        ))

        table = Table(box=box.ROUNDED)
        table.add_column("Table", style="cyan", no_wrap=True)
        table.add_column("Key", style="magenta")
        table.add_column("Rows", justify="right")
        table.add_column("New", justify="right", style="green")
        table.add_column("Deleted", justify="right", style="red")
        table.add_column("Modified", justify="right", style="yellow")
        table.add_column("Duplicates", justify="right")

        for result in results:
            table.add_row(
                result.table_name,
                result.key_display,
                f"{result.row_count_1:,} → {result.row_count_2:,}",
                f"{len(result.new_records):,}",
                f"{len(result.deleted_records):,}",
                f"{len(result.modified_records):,}",
                f"{len(result.duplicates_1):,} / {len(result.duplicates_2):,}",
            )

        self.console.print(table)


def get_progress_monitor(use_rich: bool = True, verbose: bool = True):
    """
    Get appropriate progress monitor.

    Args:
        use_rich: Whether to use Rich
        verbose: Plain monitor verbosity

    Returns:
        Progress monitor instance
    """
    if use_rich:
        return RichProgressMonitor()
    return ProgressMonitor(verbose=verbose)
