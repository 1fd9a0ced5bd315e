"""Load PDF files from disk into :class:`~pdfcatx.core.graph.ObjectGraph` instances.

Parsing is delegated to :class:`pypdf.PdfReader`. The reachable pypdf object
graph is then copied into the package's own object model so the merge engine
never touches pypdf types. While copying, the page tree is flattened: every
page hangs directly off the catalog's Pages root and inherited attributes
(``Resources``, ``MediaBox``, ``CropBox``, ``Rotate``) are materialised on
the page itself.
"""

from __future__ import annotations

import concurrent.futures
import io
import logging
import time
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from pypdf import PasswordType, PdfReader
from pypdf.errors import FileNotDecryptedError, PdfReadError, PyPdfError
from pypdf.generic import (
    ArrayObject,
    BooleanObject,
    ByteStringObject,
    DictionaryObject,
    FloatObject,
    IndirectObject,
    NameObject,
    NullObject,
    NumberObject,
    StreamObject,
    TextStringObject,
)

from ..core.graph import ObjectGraph
from ..core.model import Name, ObjectId, PdfDictionary, PdfObject, Reference, Stream
from ..exceptions import (
    CorruptedPdfError,
    EncryptedPdfError,
    NotAFileError,
    PdfLoadError,
    PdfLoadFailedError,
    PdfNotAccessibleError,
    PdfNotFoundError,
)
from ..utils import PathLike, ensure_path, format_file_size

LOGGER = logging.getLogger("pdfcatx.io")

SEQUENTIAL_THRESHOLD = 3

ProgressCallback = Callable[[int, "LoadResult"], None]


# -- Result types --------------------------------------------------------------


@dataclass(slots=True)
class LoadedSource:
    """A successfully loaded input document."""

    graph: ObjectGraph
    path: Path
    page_count: int
    file_size: int
    load_time: float


@dataclass(slots=True)
class LoadResult:
    """Outcome of loading one path: either a source or the error that stopped it."""

    path: Path
    source: Optional[LoadedSource] = None
    error: Optional[PdfLoadError] = None

    @property
    def ok(self) -> bool:
        return self.source is not None

    def unwrap(self) -> LoadedSource:
        if self.source is None:
            assert self.error is not None
            raise self.error
        return self.source


@dataclass(slots=True)
class LoadStatistics:
    success_count: int = 0
    failure_count: int = 0
    total_time: float = 0.0
    average_time: float = 0.0
    total_size: int = 0
    total_pages: int = 0

    @classmethod
    def from_results(cls, results: Sequence[LoadResult], total_time: float) -> "LoadStatistics":
        loaded = [result.source for result in results if result.source is not None]
        summed_time = sum(source.load_time for source in loaded)
        return cls(
            success_count=len(loaded),
            failure_count=len(results) - len(loaded),
            total_time=total_time,
            average_time=summed_time / len(loaded) if loaded else 0.0,
            total_size=sum(source.file_size for source in loaded),
            total_pages=sum(source.page_count for source in loaded),
        )

    def format_total_size(self) -> str:
        return format_file_size(self.total_size)


# -- pypdf conversion ----------------------------------------------------------


@dataclass
class _GraphBuilder:
    """Copy the objects reachable from a reader's trailer into the object model."""

    reader: PdfReader
    objects: Dict[ObjectId, PdfObject] = field(default_factory=dict)
    _pending: deque = field(default_factory=deque)

    def reference(self, indirect: IndirectObject) -> Reference:
        object_id = ObjectId(int(indirect.idnum), int(indirect.generation))
        if object_id not in self.objects:
            self._pending.append(object_id)
        return Reference(object_id)

    def drain(self) -> None:
        while self._pending:
            object_id = self._pending.popleft()
            if object_id in self.objects:
                continue
            resolved = self.reader.get_object(IndirectObject(object_id.number, object_id.generation, self.reader))
            if resolved is None or isinstance(resolved, NullObject):
                LOGGER.debug("Object %s could not be resolved; leaving it out", object_id)
                continue
            # reserve the slot before recursing so self-references terminate
            self.objects[object_id] = None
            self.objects[object_id] = self.convert(resolved)

    def convert(self, value: Any) -> PdfObject:
        if isinstance(value, IndirectObject):
            return self.reference(value)
        if isinstance(value, StreamObject):
            dictionary = self._convert_dictionary(value)
            dictionary.pop("Length", None)
            return Stream(dictionary=dictionary, data=bytes(value._data))
        if isinstance(value, DictionaryObject):
            return self._convert_dictionary(value)
        if isinstance(value, ArrayObject):
            return [self.convert(item) for item in value]
        if isinstance(value, BooleanObject):
            return bool(value.value)
        if isinstance(value, NameObject):
            return Name(str(value)[1:])
        if isinstance(value, TextStringObject):
            return str(value)
        if isinstance(value, ByteStringObject):
            return bytes(value)
        if isinstance(value, NumberObject):
            return int(value)
        if isinstance(value, FloatObject):
            return float(value)
        if value is None or isinstance(value, NullObject):
            return None
        if isinstance(value, (bool, int, float, str, bytes)):
            return value
        raise PdfReadError(f"Unsupported object type {type(value).__name__}")

    def _convert_dictionary(self, value: DictionaryObject) -> PdfDictionary:
        return {str(key)[1:]: self.convert(item) for key, item in value.items()}


def _page_ids(reader: PdfReader) -> List[ObjectId]:
    ids: List[ObjectId] = []
    for number, page in enumerate(reader.pages, start=1):
        reference = page.indirect_reference
        if reference is None:
            raise PdfReadError(f"Page {number} is not an indirect object")
        ids.append(ObjectId(int(reference.idnum), int(reference.generation)))
    return ids


def _version(reader: PdfReader) -> str:
    header = reader.pdf_header or ""
    return header[5:] if header.startswith("%PDF-") else "1.7"


def build_graph(reader: PdfReader) -> ObjectGraph:
    """Convert *reader*'s document into a flattened :class:`ObjectGraph`."""

    # Flattening the page tree first materialises inherited attributes.
    page_ids = _page_ids(reader)

    builder = _GraphBuilder(reader)
    root = reader.trailer.raw_get("/Root")
    if not isinstance(root, IndirectObject):
        raise PdfReadError("Trailer Root is not an indirect reference")
    trailer: PdfDictionary = {"Root": builder.reference(root)}

    raw_info = reader.trailer.raw_get("/Info") if "/Info" in reader.trailer else None
    if isinstance(raw_info, IndirectObject):
        trailer["Info"] = builder.reference(raw_info)

    builder.drain()
    graph = ObjectGraph(objects=builder.objects, trailer=trailer, version=_version(reader))

    if isinstance(raw_info, DictionaryObject):
        direct_info = builder.convert(raw_info)
        builder.drain()
        graph.max_id = max(graph.max_id, max((oid.number for oid in graph.objects), default=0))
        trailer["Info"] = Reference(graph.add_object(direct_info))

    catalog = graph.resolve_catalog()
    pages_ref = catalog.get("Pages")
    if not isinstance(pages_ref, Reference) or not isinstance(graph.objects.get(pages_ref.id), dict):
        raise PdfReadError("Catalog has no usable Pages dictionary")
    pages_root: PdfDictionary = graph.objects[pages_ref.id]  # type: ignore[assignment]

    missing = [page_id for page_id in page_ids if page_id not in graph.objects]
    if missing:
        raise PdfReadError(f"Page object(s) missing: {', '.join(str(page_id) for page_id in missing)}")

    pages_root["Kids"] = [Reference(page_id) for page_id in page_ids]
    pages_root["Count"] = len(page_ids)
    pages_root.pop("Parent", None)
    for page_id in page_ids:
        page = graph.objects[page_id]
        if not isinstance(page, dict):
            raise PdfReadError(f"Page {page_id} is not a dictionary")
        page["Parent"] = pages_ref

    # a missing object reads as null
    graph.drop_dangling_references()
    graph.prune_unreachable()
    return graph


# -- Loading -------------------------------------------------------------------


def _open_reader(path: Path, raw_bytes: bytes) -> PdfReader:
    try:
        reader = PdfReader(io.BytesIO(raw_bytes))
    except PdfReadError as exc:
        raise CorruptedPdfError(path, str(exc)) from exc
    except Exception as exc:
        raise PdfLoadFailedError(path, f"Unexpected error reading PDF: {exc}") from exc

    if reader.is_encrypted:
        try:
            outcome = reader.decrypt("")
        except (PyPdfError, NotImplementedError) as exc:
            raise EncryptedPdfError(path) from exc
        if outcome == PasswordType.NOT_DECRYPTED:
            raise EncryptedPdfError(path)
        LOGGER.debug("Opened %s with the empty user password", path)
    return reader


def load(path: PathLike) -> LoadedSource:
    """Load a single PDF file.

    Raises:
        PdfNotFoundError: If *path* does not exist.
        NotAFileError: If *path* is not a regular file.
        PdfNotAccessibleError: If the file cannot be read.
        EncryptedPdfError: If the document needs a password.
        CorruptedPdfError: If the document cannot be parsed or has no pages.
        PdfLoadFailedError: For any other failure.
    """

    pdf_path = ensure_path(path)
    start = time.perf_counter()

    if not pdf_path.exists():
        raise PdfNotFoundError(pdf_path)
    if not pdf_path.is_file():
        raise NotAFileError(pdf_path)
    try:
        raw_bytes = pdf_path.read_bytes()
    except OSError as exc:
        LOGGER.error("Cannot read %s: %s", pdf_path, exc)
        raise PdfNotAccessibleError(pdf_path) from exc
    if not raw_bytes:
        raise CorruptedPdfError(pdf_path, "File is empty")

    reader = _open_reader(pdf_path, raw_bytes)
    try:
        if len(reader.pages) == 0:
            raise CorruptedPdfError(pdf_path, "PDF has no pages")
        graph = build_graph(reader)
    except PdfLoadError:
        raise
    except FileNotDecryptedError as exc:
        raise EncryptedPdfError(pdf_path) from exc
    except PdfReadError as exc:
        raise CorruptedPdfError(pdf_path, str(exc)) from exc
    except Exception as exc:
        raise PdfLoadFailedError(pdf_path, str(exc)) from exc

    load_time = time.perf_counter() - start
    source = LoadedSource(
        graph=graph,
        path=pdf_path,
        page_count=graph.page_count,
        file_size=len(raw_bytes),
        load_time=load_time,
    )
    LOGGER.debug(
        "Loaded %s: %d page(s), %d object(s) in %.3fs",
        pdf_path,
        source.page_count,
        len(graph),
        load_time,
    )
    return source


def _load_result(path: Path) -> LoadResult:
    try:
        return LoadResult(path=path, source=load(path))
    except PdfLoadError as exc:
        LOGGER.debug("Failed to load %s: %s", path, exc.message)
        return LoadResult(path=path, error=exc)


def load_batch(
    paths: Sequence[PathLike],
    workers: Optional[int] = None,
    progress: Optional[ProgressCallback] = None,
) -> Tuple[List[LoadResult], LoadStatistics]:
    """Load *paths* and return one :class:`LoadResult` per path, in input order.

    Small batches are loaded sequentially; larger ones use a thread pool of
    *workers* threads. ``progress`` is called with ``(index, result)`` as each
    file finishes, which may be out of order for parallel loads.
    """

    normalised = [ensure_path(path) for path in paths]
    start = time.perf_counter()
    results: List[Optional[LoadResult]] = [None] * len(normalised)

    if len(normalised) <= SEQUENTIAL_THRESHOLD:
        for index, path in enumerate(normalised):
            results[index] = _load_result(path)
            if progress is not None:
                progress(index, results[index])  # type: ignore[arg-type]
    else:
        max_workers = max(1, workers or 1)
        LOGGER.debug("Loading %d file(s) with %d worker(s)", len(normalised), max_workers)
        with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_to_idx = {
                executor.submit(_load_result, path): index
                for index, path in enumerate(normalised)
            }
            for future in concurrent.futures.as_completed(future_to_idx):
                index = future_to_idx[future]
                results[index] = future.result()
                if progress is not None:
                    progress(index, results[index])  # type: ignore[arg-type]

    ordered = [result for result in results if result is not None]
    statistics = LoadStatistics.from_results(ordered, time.perf_counter() - start)
    LOGGER.info(
        "Loaded %d of %d file(s) in %.3fs",
        statistics.success_count,
        len(ordered),
        statistics.total_time,
    )
    return ordered, statistics


__all__ = [
    "LoadedSource",
    "LoadResult",
    "LoadStatistics",
    "ProgressCallback",
    "build_graph",
    "load",
    "load_batch",
]
