"""Terminal output for the command line interface."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from rich.console import Console
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn
from rich.table import Table

from .config import MergeConfig
from .io.reader import LoadResult
from .io.writer import WriteStatistics
from .merge.merger import MergeResult
from .utils import format_file_size
from .validation import ValidationSummary

console = Console()
error_console = Console(stderr=True)


class OutputFormatter:
    """Print user-facing messages according to the verbosity flags."""

    def __init__(self, verbose: bool = False, quiet: bool = False) -> None:
        self.verbose = verbose
        self.quiet = quiet

    @classmethod
    def from_config(cls, config: MergeConfig) -> "OutputFormatter":
        return cls(verbose=config.verbose, quiet=not config.should_print())

    def info(self, message: str) -> None:
        if not self.quiet:
            console.print(message)

    def success(self, message: str) -> None:
        if not self.quiet:
            console.print(f"[bold green]✓[/bold green] {message}")

    def warning(self, message: str) -> None:
        if not self.quiet:
            error_console.print(f"[bold yellow]⚠ Warning:[/bold yellow] {message}")

    def error(self, message: str) -> None:
        error_console.print(f"[bold red]✗ Error:[/bold red] {message}")

    @contextmanager
    def progress(self, description: str, total: int) -> Iterator[Optional[Callable[[int, LoadResult], None]]]:
        """Yield a ``(index, result)`` callback that advances a progress bar.

        Nothing is shown in quiet mode; the callback is then ``None``.
        """

        if self.quiet:
            yield None
            return

        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task(description, total=total)

            def advance(index: int, result: LoadResult) -> None:
                progress.advance(task)

            yield advance

    def validation_summary(self, summary: ValidationSummary) -> None:
        if summary.files_failed:
            self.warning(f"{summary.files_failed} file(s) failed validation")
        if self.verbose:
            table = Table(title="Input Files")
            table.add_column("#", style="dim", justify="right")
            table.add_column("File", style="cyan")
            table.add_column("Pages", style="green", justify="right")
            table.add_column("Version")
            table.add_column("Size", justify="right")
            for index, result in enumerate(summary.results, start=1):
                version = ".".join(str(part) for part in result.version) if result.version else "?"
                table.add_row(
                    str(index),
                    result.path.name,
                    str(result.page_count),
                    version,
                    format_file_size(result.file_size),
                )
            console.print(table)
        self.info(
            f"Validated {summary.files_validated} file(s): "
            f"{summary.total_pages} pages, {summary.format_total_size()}"
        )

    def dry_run(self, config: MergeConfig, summary: ValidationSummary) -> None:
        table = Table(title="Dry Run", show_header=False)
        table.add_column("Property", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("Inputs", str(summary.files_validated))
        table.add_row("Total pages", str(summary.total_pages))
        table.add_row("Output", str(config.output))
        table.add_row("Compression", config.options.compression.value)
        table.add_row("Bookmarks", "yes" if config.options.bookmarks else "no")
        if config.options.page_range is not None:
            table.add_row("Pages", str(config.options.page_range))
        if config.options.rotation is not None:
            table.add_row("Rotation", f"{config.options.rotation.degrees}°")
        console.print(table)
        for path in config.inputs:
            console.print(f"  • {path}")
        console.print("[bold cyan]Dry run: no output written[/bold cyan]")

    def merge_summary(self, result: MergeResult, written: WriteStatistics) -> None:
        statistics = result.statistics
        if statistics.skipped:
            self.warning(f"Skipped {statistics.skipped} file(s)")
        self.success(
            f"Merged {statistics.files_merged} file(s) ({statistics.total_pages} pages) "
            f"into {written.output_path}"
        )
        if not self.verbose:
            return

        table = Table(title="Merge Statistics", show_header=False)
        table.add_column("Property", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("Files merged", str(statistics.files_merged))
        table.add_row("Total pages", str(statistics.total_pages))
        table.add_row("Input size", statistics.format_input_size())
        table.add_row("Output size", written.format_file_size())
        table.add_row("Load time", f"{statistics.load_time:.2f}s")
        table.add_row("Merge time", f"{statistics.merge_time:.2f}s")
        table.add_row("Write time", f"{written.write_time:.2f}s")
        table.add_row("Bookmarks", str(statistics.bookmarks_added))
        table.add_row("Compressed", "yes" if statistics.compressed else "no")
        console.print(table)


__all__ = ["OutputFormatter", "console", "error_console"]
