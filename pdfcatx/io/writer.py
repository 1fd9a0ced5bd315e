"""Serialise an :class:`~pdfcatx.core.graph.ObjectGraph` to a PDF file.

Each object is converted back into the matching :mod:`pypdf.generic` type and
written with pypdf's own ``write_to_stream`` so that string escaping, name
encoding and number formatting follow pypdf's rules. The surrounding file
structure (header, classic cross-reference table and trailer) is assembled
here.
"""

from __future__ import annotations

import io
import logging
import os
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Dict

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
    PdfObject as PypdfObject,
    StreamObject,
    TextStringObject,
)

from ..core.graph import ObjectGraph
from ..core.model import Name, PdfObject, Reference, Stream
from ..exceptions import PdfWriteError
from ..utils import PathLike, ensure_path, format_file_size

LOGGER = logging.getLogger("pdfcatx.io")

_BINARY_MARKER = b"%\xe2\xe3\xcf\xd3\n"


@dataclass(slots=True)
class WriteOptions:
    atomic: bool = True


@dataclass(slots=True)
class WriteStatistics:
    write_time: float
    file_size: int
    output_path: Path
    object_count: int

    def format_file_size(self) -> str:
        return format_file_size(self.file_size)


def to_pypdf(value: PdfObject) -> PypdfObject:
    """Convert a value of the object model into the matching pypdf object."""

    if value is None:
        return NullObject()
    if isinstance(value, bool):
        return BooleanObject(value)
    if isinstance(value, int):
        return NumberObject(value)
    if isinstance(value, float):
        return FloatObject(value)
    if isinstance(value, Name):
        return NameObject(f"/{value.value}")
    if isinstance(value, str):
        return TextStringObject(value)
    if isinstance(value, bytes):
        return ByteStringObject(value)
    if isinstance(value, Reference):
        return IndirectObject(value.id.number, value.id.generation, None)
    if isinstance(value, Stream):
        stream = StreamObject()
        stream.update(_dictionary_items(value.dictionary))
        stream._data = value.data
        return stream
    if isinstance(value, list):
        return ArrayObject(to_pypdf(item) for item in value)
    if isinstance(value, dict):
        dictionary = DictionaryObject()
        dictionary.update(_dictionary_items(value))
        return dictionary
    raise TypeError(f"Unsupported PDF object type: {type(value).__name__}")


def _dictionary_items(dictionary: Dict[str, Any]) -> Dict[NameObject, PypdfObject]:
    return {NameObject(f"/{key}"): to_pypdf(item) for key, item in dictionary.items()}


def write_graph(graph: ObjectGraph, output: BinaryIO) -> None:
    """Write *graph* as a complete PDF file to the binary stream *output*."""

    output.write(f"%PDF-{graph.version}\n".encode("ascii"))
    output.write(_BINARY_MARKER)

    offsets: Dict[int, tuple[int, int]] = {}
    for object_id in sorted(graph.objects):
        offsets[object_id.number] = (output.tell(), object_id.generation)
        output.write(f"{object_id.number} {object_id.generation} obj\n".encode("ascii"))
        to_pypdf(graph.objects[object_id]).write_to_stream(output)
        output.write(b"\nendobj\n")

    size = max(offsets, default=0) + 1
    xref_offset = output.tell()
    output.write(f"xref\n0 {size}\n".encode("ascii"))
    output.write(b"0000000000 65535 f \n")
    for number in range(1, size):
        if number in offsets:
            offset, generation = offsets[number]
            output.write(f"{offset:010d} {generation:05d} n \n".encode("ascii"))
        else:
            output.write(b"0000000000 00001 f \n")

    trailer = DictionaryObject()
    trailer[NameObject("/Size")] = NumberObject(size)
    for key in ("Root", "Info"):
        value = graph.trailer.get(key)
        if isinstance(value, Reference):
            trailer[NameObject(f"/{key}")] = to_pypdf(value)
    output.write(b"trailer\n")
    trailer.write_to_stream(output)
    output.write(f"\nstartxref\n{xref_offset}\n%%EOF\n".encode("ascii"))


def to_bytes(graph: ObjectGraph) -> bytes:
    buffer = io.BytesIO()
    write_graph(graph, buffer)
    return buffer.getvalue()


class PdfGraphWriter:
    """Write merged graphs to disk, atomically unless told otherwise."""

    def __init__(self, options: WriteOptions | None = None) -> None:
        self.options = options or WriteOptions()

    @classmethod
    def non_atomic(cls) -> "PdfGraphWriter":
        return cls(WriteOptions(atomic=False))

    def save(self, graph: ObjectGraph, path: PathLike) -> WriteStatistics:
        """Serialise *graph* to *path*.

        With atomic writes the document is written to a temporary file in the
        target directory and moved into place, so a failure never leaves a
        partial output behind.

        Raises:
            PdfWriteError: If the file cannot be created, written or moved.
        """

        output_path = ensure_path(path)
        start = time.perf_counter()

        if not output_path.parent.is_dir():
            raise PdfWriteError(output_path, f"Directory does not exist: {output_path.parent}")

        try:
            data = to_bytes(graph)
        except (TypeError, ValueError) as exc:
            LOGGER.error("Failed to serialise %s: %s", output_path, exc)
            raise PdfWriteError(output_path, str(exc)) from exc

        if self.options.atomic:
            self._write_atomic(output_path, data)
        else:
            try:
                output_path.write_bytes(data)
            except OSError as exc:
                LOGGER.error("Failed to write %s: %s", output_path, exc)
                raise PdfWriteError(output_path, str(exc)) from exc

        statistics = WriteStatistics(
            write_time=time.perf_counter() - start,
            file_size=len(data),
            output_path=output_path,
            object_count=len(graph),
        )
        LOGGER.info(
            "Wrote %s (%s, %d object(s))",
            output_path,
            statistics.format_file_size(),
            statistics.object_count,
        )
        return statistics

    @staticmethod
    def _write_atomic(output_path: Path, data: bytes) -> None:
        temp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                dir=output_path.parent,
                prefix=f".{output_path.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                temp_name = handle.name
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_name, output_path)
        except OSError as exc:
            LOGGER.error("Failed to write %s: %s", output_path, exc)
            if temp_name is not None and os.path.exists(temp_name):
                os.unlink(temp_name)
            raise PdfWriteError(output_path, str(exc)) from exc


def save(graph: ObjectGraph, path: PathLike) -> WriteStatistics:
    return PdfGraphWriter().save(graph, path)


__all__ = [
    "WriteOptions",
    "WriteStatistics",
    "PdfGraphWriter",
    "to_pypdf",
    "write_graph",
    "to_bytes",
    "save",
]
