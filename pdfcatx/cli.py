"""
Command-line interface for pdfcatx.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.logging import RichHandler

from . import __version__
from .config import (
    CompressionLevel,
    DocumentMetadata,
    MergeConfig,
    MergeOptions,
    OverwriteMode,
    collect_inputs,
)
from .exceptions import CancelledError, InvalidConfigError, OutputExistsError, PdfCatError
from .io.writer import PdfGraphWriter
from .merge.merger import Merger
from .output import OutputFormatter, error_console
from .utils import get_logger
from .validation import validate_inputs, validate_output, validate_page_range

LOGGER = logging.getLogger("pdfcatx.cli")


def configure_logging(verbose: bool, quiet: bool) -> logging.Logger:
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    handler = RichHandler(console=error_console, show_time=False, show_path=False)
    return get_logger("pdfcatx", level=level, handler=handler)


def resolve_overwrite_mode(force: bool, no_clobber: bool, quiet: bool) -> OverwriteMode:
    if force and no_clobber:
        raise InvalidConfigError("Cannot use both --force and --no-clobber")
    if force:
        return OverwriteMode.FORCE
    if no_clobber or quiet:
        return OverwriteMode.NO_CLOBBER
    return OverwriteMode.PROMPT


def check_overwrite(config: MergeConfig) -> None:
    """Apply the overwrite policy when the output already exists."""

    if not config.output.exists():
        return
    if config.overwrite_mode is OverwriteMode.FORCE:
        LOGGER.debug("Overwriting %s", config.output)
        return
    if config.overwrite_mode is OverwriteMode.NO_CLOBBER:
        raise OutputExistsError(config.output)
    try:
        confirmed = click.confirm(
            f"Output file {config.output} already exists. Overwrite?",
            default=False,
        )
    except click.Abort:
        raise CancelledError() from None
    if not confirmed:
        raise CancelledError()


def run(config: MergeConfig, formatter: OutputFormatter) -> None:
    """Validate, merge and write according to *config*."""

    config.validate()
    validate_output(config.output)

    summary = validate_inputs(config.inputs, config.options.continue_on_error)
    formatter.validation_summary(summary)
    if config.options.page_range is not None:
        validate_page_range(summary, config.options.page_range)

    check_overwrite(config)

    if config.dry_run:
        formatter.dry_run(config, summary)
        return

    inputs = [result.path for result in summary.results]
    merger = Merger()
    with formatter.progress("Loading PDFs", total=len(inputs)) as advance:
        result = merger.merge(inputs, config.options, progress=advance)
    for warning in result.warnings:
        formatter.warning(warning)

    written = PdfGraphWriter().save(result.graph, config.output)
    formatter.merge_summary(result, written)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__)
@click.argument("inputs", nargs=-1, type=click.Path(path_type=Path))
@click.option("--output", "-o", required=True, type=click.Path(path_type=Path), help="Output PDF file")
@click.option("--dry-run", "-n", is_flag=True, help="Validate inputs and show the plan without writing")
@click.option("--verbose", "-v", is_flag=True, help="Show detailed progress and statistics")
@click.option("--force", "-f", is_flag=True, help="Overwrite the output file without asking")
@click.option("--no-clobber", is_flag=True, help="Never overwrite an existing output file")
@click.option("--quiet", "-q", is_flag=True, help="Only print errors")
@click.option("--bookmarks", "-b", is_flag=True, help="Add one bookmark per input file")
@click.option(
    "--compression",
    "-c",
    type=click.Choice([level.value for level in CompressionLevel], case_sensitive=False),
    default=CompressionLevel.STANDARD.value,
    show_default=True,
    help="Compression level",
)
@click.option("--title", help="Document title")
@click.option("--author", help="Document author")
@click.option("--subject", help="Document subject")
@click.option("--keywords", help="Document keywords")
@click.option("--continue-on-error", is_flag=True, help="Skip inputs that cannot be loaded")
@click.option(
    "--input-list",
    type=click.Path(path_type=Path),
    help="File with one input path per line ('#' starts a comment)",
)
@click.option("--jobs", "-j", type=int, help="Number of parallel loader threads")
@click.option("--pages", help="Pages to take from every input, e.g. '1-3,5'")
@click.option("--rotate", type=click.Choice(["90", "180", "270"]), help="Rotate every page clockwise")
def cli(
    inputs,
    output,
    dry_run,
    verbose,
    force,
    no_clobber,
    quiet,
    bookmarks,
    compression,
    title,
    author,
    subject,
    keywords,
    continue_on_error,
    input_list,
    jobs,
    pages,
    rotate,
):
    """
    Merge PDF files into a single document.

    Examples:

        pdfcatx a.pdf b.pdf -o merged.pdf

        pdfcatx chapters/*.pdf -o book.pdf --bookmarks --title "My Book"

        pdfcatx --input-list files.txt -o out.pdf --pages 1-2 --rotate 90
    """
    formatter = OutputFormatter(verbose=verbose, quiet=quiet and not dry_run)
    try:
        configure_logging(verbose, quiet)
        options = MergeOptions(
            bookmarks=bookmarks,
            compression=compression,
            metadata=DocumentMetadata(title=title, author=author, subject=subject, keywords=keywords),
            continue_on_error=continue_on_error,
            page_range=pages,
            rotation=int(rotate) if rotate else None,
            jobs=jobs,
        )
        config = MergeConfig(
            inputs=collect_inputs(inputs, input_list),
            output=output,
            options=options,
            dry_run=dry_run,
            verbose=verbose,
            quiet=quiet,
            overwrite_mode=resolve_overwrite_mode(force, no_clobber, quiet),
        )
        formatter = OutputFormatter.from_config(config)
        run(config, formatter)
    except PdfCatError as exc:
        formatter.error(exc.message)
        sys.exit(exc.exit_code)
    except KeyboardInterrupt:
        formatter.error(CancelledError().message)
        sys.exit(CancelledError.exit_code)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
