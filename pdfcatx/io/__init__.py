"""Reading PDF files into object graphs and writing them back out."""

from __future__ import annotations

from .reader import LoadedSource, LoadResult, LoadStatistics, load, load_batch
from .writer import PdfGraphWriter, WriteOptions, WriteStatistics, to_bytes

__all__ = [
    "LoadedSource",
    "LoadResult",
    "LoadStatistics",
    "load",
    "load_batch",
    "PdfGraphWriter",
    "WriteOptions",
    "WriteStatistics",
    "to_bytes",
]
