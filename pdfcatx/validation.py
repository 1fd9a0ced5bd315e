"""Pre-merge checks for input and output paths."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .config import PageRange
from .core.model import Stream
from .exceptions import (
    InvalidConfigError,
    InvalidPageRangeError,
    NoFilesToMergeError,
    PdfLoadError,
)
from .io.reader import LoadedSource, load
from .utils import PathLike, ensure_path, format_file_size

LOGGER = logging.getLogger("pdfcatx.validation")


@dataclass(slots=True)
class ValidationResult:
    """Structural facts about one readable input."""

    path: Path
    page_count: int
    version: Optional[Tuple[int, int]]
    file_size: int
    object_count: int
    page_dimensions: Optional[Tuple[float, float]] = None

    @classmethod
    def from_source(cls, source: LoadedSource) -> "ValidationResult":
        return cls(
            path=source.path,
            page_count=source.page_count,
            version=_parse_version(source.graph.version),
            file_size=source.file_size,
            object_count=len(source.graph),
            page_dimensions=_first_page_dimensions(source),
        )


@dataclass(slots=True)
class ValidationSummary:
    results: List[ValidationResult] = field(default_factory=list)
    total_pages: int = 0
    total_size: int = 0
    files_validated: int = 0
    files_failed: int = 0
    errors: List[PdfLoadError] = field(default_factory=list)

    @classmethod
    def from_results(
        cls,
        results: List[ValidationResult],
        errors: Optional[List[PdfLoadError]] = None,
    ) -> "ValidationSummary":
        errors = errors or []
        return cls(
            results=results,
            total_pages=sum(result.page_count for result in results),
            total_size=sum(result.file_size for result in results),
            files_validated=len(results),
            files_failed=len(errors),
            errors=errors,
        )

    def format_total_size(self) -> str:
        return format_file_size(self.total_size)


def _parse_version(version: str) -> Optional[Tuple[int, int]]:
    major, _, minor = version.partition(".")
    if not major.isdigit() or not minor.isdigit():
        return None
    return int(major), int(minor)


def _first_page_dimensions(source: LoadedSource) -> Optional[Tuple[float, float]]:
    pages = source.graph.get_pages()
    if not pages:
        return None
    page = source.graph.objects.get(pages[1])
    if isinstance(page, Stream) or not isinstance(page, dict):
        return None
    media_box = page.get("MediaBox")
    if not isinstance(media_box, list) or len(media_box) < 4:
        return None
    x0, y0, x1, y1 = media_box[:4]
    if not all(isinstance(value, (int, float)) and not isinstance(value, bool) for value in (x0, y0, x1, y1)):
        return None
    return float(x1 - x0), float(y1 - y0)


def validate_file(path: PathLike) -> ValidationResult:
    """Load *path* and describe it.

    Raises:
        PdfLoadError: Any of the loader's per-file errors.
    """

    return ValidationResult.from_source(load(path))


def validate_inputs(paths: Sequence[PathLike], continue_on_error: bool = False) -> ValidationSummary:
    """Validate every input in order.

    Raises:
        PdfLoadError: The first failure, unless *continue_on_error* is set.
        NoFilesToMergeError: If no input is valid.
    """

    results: List[ValidationResult] = []
    errors: List[PdfLoadError] = []
    for path in paths:
        try:
            results.append(validate_file(path))
        except PdfLoadError as exc:
            if not continue_on_error:
                raise
            LOGGER.warning("Skipping %s: %s", exc.path, exc.message)
            errors.append(exc)

    if not results:
        raise NoFilesToMergeError()
    return ValidationSummary.from_results(results, errors)


def validate_output(path: PathLike) -> Path:
    """Check that *path* can be created: its directory exists and it is not a directory."""

    output = ensure_path(path)
    if output.is_dir():
        raise InvalidConfigError(f"Output path is a directory: {output}")
    if not output.parent.is_dir():
        raise InvalidConfigError(f"Output directory does not exist: {output.parent}")
    return output


def validate_page_range(summary: ValidationSummary, page_range: PageRange) -> None:
    """Reject *page_range* if it reaches past the end of any validated input."""

    for result in summary.results:
        if page_range.highest > result.page_count:
            raise InvalidPageRangeError(str(page_range), result.page_count, result.path)


__all__ = [
    "ValidationResult",
    "ValidationSummary",
    "validate_file",
    "validate_inputs",
    "validate_output",
    "validate_page_range",
]
