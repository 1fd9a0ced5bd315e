"""Merge orchestration: combine loaded sources into a single object graph."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from ..config import CompressionLevel, MergeOptions
from ..core.graph import ObjectGraph
from ..exceptions import InvalidPageRangeError, NoFilesToMergeError
from ..io.reader import LoadedSource, LoadResult, LoadStatistics, ProgressCallback, load_batch
from ..io.writer import PdfGraphWriter
from ..utils import PathLike, format_file_size
from .bookmarks import add_bookmarks_for_files
from .metadata import set_metadata
from .pages import extract, rotate_all, splice
from .renumber import renumber

LOGGER = logging.getLogger("pdfcatx.merge")

BatchLoader = Callable[..., Tuple[List[LoadResult], LoadStatistics]]


@dataclass(slots=True)
class MergeStatistics:
    files_merged: int = 0
    total_pages: int = 0
    load_time: float = 0.0
    merge_time: float = 0.0
    input_size: int = 0
    bookmarks_added: int = 0
    compressed: bool = False
    skipped: int = 0

    def format_input_size(self) -> str:
        return format_file_size(self.input_size)


@dataclass(slots=True)
class MergeResult:
    graph: ObjectGraph
    statistics: MergeStatistics
    merged_files: List[Path] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


class Merger:
    """Combine PDF documents page tree by page tree.

    Each source after the first is renumbered above the accumulated graph's
    watermark, its objects are inserted wholesale and its pages are appended
    to the first source's page tree. The pipeline runs on a single thread;
    only loading is parallel.
    """

    def __init__(self, loader: BatchLoader = load_batch) -> None:
        self._loader = loader

    def merge(
        self,
        inputs: Sequence[PathLike],
        options: MergeOptions | None = None,
        progress: Optional[ProgressCallback] = None,
    ) -> MergeResult:
        """Load *inputs* and merge them according to *options*."""

        options = options or MergeOptions()
        options.validate()
        results, load_statistics = self._loader(inputs, options.effective_jobs(), progress)
        return self.merge_loaded(results, options, load_time=load_statistics.total_time)

    def merge_loaded(
        self,
        results: Sequence[LoadResult],
        options: MergeOptions | None = None,
        load_time: float = 0.0,
    ) -> MergeResult:
        """Merge already loaded sources.

        Failed loads abort the merge with their error unless
        ``options.continue_on_error`` is set, in which case they are reported
        in :attr:`MergeResult.warnings` and skipped.

        Raises:
            PdfLoadError: The first load failure, without ``continue_on_error``.
            NoFilesToMergeError: If no source loaded successfully.
            MergeFailedError: If a page tree cannot be restructured.
        """

        options = options or MergeOptions()
        sources, warnings = self._partition(results, options.continue_on_error)
        if not sources:
            raise NoFilesToMergeError()

        start = time.perf_counter()
        graph, bookmarks_added = self.merge_sources(sources, options)
        merge_time = time.perf_counter() - start

        statistics = MergeStatistics(
            files_merged=len(sources),
            total_pages=graph.page_count,
            load_time=load_time,
            merge_time=merge_time,
            input_size=sum(source.file_size for source in sources),
            bookmarks_added=bookmarks_added,
            compressed=options.compression is not CompressionLevel.NONE,
            skipped=len(warnings),
        )
        LOGGER.info(
            "Merged %d file(s) into %d page(s) in %.3fs",
            statistics.files_merged,
            statistics.total_pages,
            merge_time,
        )
        return MergeResult(
            graph=graph,
            statistics=statistics,
            merged_files=[source.path for source in sources],
            warnings=warnings,
        )

    @staticmethod
    def _partition(
        results: Sequence[LoadResult],
        continue_on_error: bool,
    ) -> Tuple[List[LoadedSource], List[str]]:
        sources: List[LoadedSource] = []
        warnings: List[str] = []
        for result in results:
            if result.source is not None:
                sources.append(result.source)
                continue
            if not continue_on_error:
                result.unwrap()
            message = result.error.message if result.error is not None else f"Failed to load {result.path}"
            LOGGER.warning("Skipping file due to error: %s", message)
            warnings.append(message)
        return sources, warnings

    def merge_sources(
        self,
        sources: Sequence[LoadedSource],
        options: MergeOptions,
    ) -> Tuple[ObjectGraph, int]:
        """Run the merge pipeline over *sources*; return the graph and bookmark count."""

        if not sources:
            raise NoFilesToMergeError()

        merged = renumber(self._prepare(sources[0], options), starting_at=1)

        for source in sources[1:]:
            document = self._prepare(source, options)
            renumber(document, starting_at=merged.max_id + 1)
            page_ids = list(document.get_pages().values())
            merged.objects.update(document.objects)
            merged.max_id = document.max_id
            splice(merged, page_ids)
            LOGGER.debug("Absorbed %s (%d page(s))", source.path, len(page_ids))

        bookmarks_added = 0
        if options.bookmarks:
            bookmarks_added = add_bookmarks_for_files(merged, [source.path for source in sources])

        if not options.metadata.is_empty():
            set_metadata(merged, options.metadata)

        if options.compression is CompressionLevel.STANDARD:
            merged.compact()
        elif options.compression is CompressionLevel.MAXIMUM:
            merged.compact()
            merged.prune_unreachable()

        renumber(merged, starting_at=1)
        return merged, bookmarks_added

    @staticmethod
    def _prepare(source: LoadedSource, options: MergeOptions) -> ObjectGraph:
        if options.page_range is None:
            document = source.graph.clone()
        else:
            try:
                document = extract(source.graph, options.page_range)
            except InvalidPageRangeError as exc:
                raise InvalidPageRangeError(exc.requested, exc.total, source.path) from None
        if options.rotation is not None:
            rotate_all(document, options.rotation)
        return document


def merge(
    inputs: Sequence[PathLike],
    options: MergeOptions | None = None,
    progress: Optional[ProgressCallback] = None,
) -> MergeResult:
    return Merger().merge(inputs, options, progress)


def merge_pdfs(
    inputs: Sequence[PathLike],
    output: PathLike,
    *,
    options: MergeOptions | None = None,
) -> Path:
    """Merge *inputs* into *output* and return the resulting path.

    Args:
        inputs: Paths of the PDF files to merge, in order.
        output: Destination of the merged document. It is replaced
            atomically if it already exists.
        options: Merge options; defaults to :class:`MergeOptions`.

    Raises:
        PdfCatError: If loading, merging or writing fails.
    """

    result = merge(inputs, options)
    written = PdfGraphWriter().save(result.graph, output)
    LOGGER.info("Merged %d PDFs into %s", result.statistics.files_merged, written.output_path)
    return written.output_path


__all__ = ["MergeStatistics", "MergeResult", "Merger", "merge", "merge_pdfs"]
