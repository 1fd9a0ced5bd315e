"""Configuration objects for :mod:`pdfcatx`.

These classes turn loosely typed user input (CLI flags, keyword arguments)
into validated values the merge engine can rely on.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .exceptions import InputListError, InvalidConfigError
from .utils import PathLike, ensure_path

LOGGER = logging.getLogger("pdfcatx.config")

_SPAN = re.compile(r"^(\d+)\s*-\s*(\d+)$")


class CompressionLevel(str, Enum):
    """How aggressively the merged document is compacted."""

    NONE = "none"
    STANDARD = "standard"
    MAXIMUM = "maximum"

    @classmethod
    def parse(cls, value: "str | CompressionLevel") -> "CompressionLevel":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidConfigError(
                f"Invalid compression level: {value}. Must be one of: none, standard, maximum"
            ) from None


class Rotation(int, Enum):
    """Clockwise page rotation applied to every input page."""

    CLOCKWISE_90 = 90
    CLOCKWISE_180 = 180
    CLOCKWISE_270 = 270

    @classmethod
    def from_degrees(cls, degrees: "int | str | Rotation") -> "Rotation":
        if isinstance(degrees, cls):
            return degrees
        try:
            return cls(int(degrees))
        except ValueError:
            raise InvalidConfigError(
                f"Invalid rotation: {degrees}. Must be 90, 180, or 270"
            ) from None

    @property
    def degrees(self) -> int:
        return int(self.value)


class OverwriteMode(str, Enum):
    """What to do when the output file already exists."""

    PROMPT = "prompt"
    FORCE = "force"
    NO_CLOBBER = "no_clobber"


@dataclass(frozen=True)
class PageRange:
    """A union of 1-indexed pages and inclusive page spans, e.g. ``"1-3,5"``."""

    items: Tuple[Tuple[int, int], ...]
    text: str = ""

    @classmethod
    def parse(cls, text: str) -> "PageRange":
        """Parse *text* into a :class:`PageRange`.

        Raises:
            InvalidConfigError: If the specification is empty, contains a zero
                or non-numeric page, or a span whose start exceeds its end.
        """

        if text is None or not str(text).strip():
            raise InvalidConfigError("Page range cannot be empty")

        items: List[Tuple[int, int]] = []
        for token in str(text).split(","):
            token = token.strip()
            if "-" in token:
                match = _SPAN.match(token)
                if not match:
                    raise InvalidConfigError(
                        f"Invalid page range format: '{token}'. Expected format like '1-5'"
                    )
                start, end = int(match.group(1)), int(match.group(2))
                if start == 0 or end == 0:
                    raise InvalidConfigError("Page numbers must be positive (1-indexed)")
                if start > end:
                    raise InvalidConfigError(
                        f"Invalid range {start}-{end}: start page must be less than or equal to end page"
                    )
                items.append((start, end))
            else:
                if not token.isdigit():
                    raise InvalidConfigError(f"Invalid page number: '{token}'")
                page = int(token)
                if page == 0:
                    raise InvalidConfigError("Page numbers must be positive (1-indexed)")
                items.append((page, page))

        return cls(items=tuple(items), text=str(text).strip())

    def contains(self, page: int) -> bool:
        return any(start <= page <= end for start, end in self.items)

    @property
    def highest(self) -> int:
        return max(end for _, end in self.items)

    def pages(self) -> List[int]:
        """Return every requested page number, sorted and de-duplicated."""

        requested: set[int] = set()
        for start, end in self.items:
            requested.update(range(start, end + 1))
        return sorted(requested)

    def to_pages(self, max_pages: int) -> List[int]:
        """Return the requested pages that exist in a *max_pages* document."""

        return [page for page in range(1, max_pages + 1) if self.contains(page)]

    def __str__(self) -> str:
        return self.text or ",".join(
            str(start) if start == end else f"{start}-{end}" for start, end in self.items
        )


@dataclass(frozen=True)
class DocumentMetadata:
    """User supplied document information fields."""

    title: Optional[str] = None
    author: Optional[str] = None
    subject: Optional[str] = None
    keywords: Optional[str] = None

    def __post_init__(self) -> None:
        for name in ("title", "author", "subject", "keywords"):
            value = getattr(self, name)
            if value is not None:
                value = str(value).strip() or None
            object.__setattr__(self, name, value)

    def is_empty(self) -> bool:
        return not any((self.title, self.author, self.subject, self.keywords))

    def items(self) -> List[Tuple[str, str]]:
        """Return the non-empty fields keyed by their Info dictionary names."""

        fields = (
            ("Title", self.title),
            ("Author", self.author),
            ("Subject", self.subject),
            ("Keywords", self.keywords),
        )
        return [(key, value) for key, value in fields if value]


@dataclass
class MergeOptions:
    """Options controlling a single merge call."""

    bookmarks: bool = False
    compression: CompressionLevel = CompressionLevel.STANDARD
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)
    continue_on_error: bool = False
    page_range: Optional[PageRange] = None
    rotation: Optional[Rotation] = None
    jobs: Optional[int] = None

    def __post_init__(self) -> None:
        self.compression = CompressionLevel.parse(self.compression)
        if isinstance(self.page_range, str):
            self.page_range = PageRange.parse(self.page_range)
        if self.rotation is not None:
            self.rotation = Rotation.from_degrees(self.rotation)

    def validate(self) -> None:
        if self.jobs is not None and self.jobs < 1:
            raise InvalidConfigError("Number of jobs must be at least 1")

    def effective_jobs(self) -> int:
        return self.jobs or os.cpu_count() or 1


@dataclass
class MergeConfig:
    """Everything a CLI run needs: inputs, output, options and presentation."""

    inputs: List[Path]
    output: Path
    options: MergeOptions = field(default_factory=MergeOptions)
    dry_run: bool = False
    verbose: bool = False
    quiet: bool = False
    overwrite_mode: OverwriteMode = OverwriteMode.PROMPT

    def __post_init__(self) -> None:
        self.inputs = [ensure_path(path) for path in self.inputs]
        self.output = ensure_path(self.output)

    def validate(self) -> None:
        """Reject empty or conflicting configurations before any I/O happens."""

        if not self.inputs:
            raise InvalidConfigError("No input files specified")
        if self.verbose and self.quiet:
            raise InvalidConfigError("Cannot use both --verbose and --quiet")
        self.options.validate()
        for input_path in self.inputs:
            if input_path == self.output:
                raise InvalidConfigError(
                    f"Output file cannot be the same as an input file: {self.output}"
                )

    def should_print(self) -> bool:
        return not self.quiet or self.dry_run


def read_input_list(path: PathLike) -> List[Path]:
    """Read input paths from *path*, one per line.

    Blank lines and lines starting with ``#`` are ignored. Relative entries are
    resolved against the current working directory.
    """

    list_path = ensure_path(path)
    try:
        lines = list_path.read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        LOGGER.error("Failed to read input list %s: %s", list_path, exc)
        raise InputListError(list_path, str(exc)) from exc

    entries = [line.strip() for line in lines]
    paths = [ensure_path(entry) for entry in entries if entry and not entry.startswith("#")]
    LOGGER.debug("Read %d input path(s) from %s", len(paths), list_path)
    return paths


def collect_inputs(inputs: Sequence[PathLike], input_list: PathLike | None = None) -> List[Path]:
    """Combine positional inputs with the entries of an optional list file."""

    collected = [ensure_path(path) for path in inputs]
    if input_list is not None:
        collected.extend(read_input_list(input_list))
    return collected


__all__ = [
    "CompressionLevel",
    "Rotation",
    "OverwriteMode",
    "PageRange",
    "DocumentMetadata",
    "MergeOptions",
    "MergeConfig",
    "read_input_list",
    "collect_inputs",
]
