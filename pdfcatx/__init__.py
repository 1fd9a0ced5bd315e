"""pdfcatx: merge PDF documents at the object-graph level."""

from __future__ import annotations

__version__ = "0.1.0"

from .config import (
    CompressionLevel,
    DocumentMetadata,
    MergeConfig,
    MergeOptions,
    OverwriteMode,
    PageRange,
    Rotation,
    read_input_list,
)
from .core import ObjectGraph, ObjectId
from .exceptions import (
    BookmarkError,
    CancelledError,
    CorruptedPdfError,
    EncryptedPdfError,
    InputListError,
    InvalidConfigError,
    InvalidPageRangeError,
    MergeFailedError,
    MetadataError,
    NoFilesToMergeError,
    NotAFileError,
    OutputExistsError,
    PdfCatError,
    PdfLoadError,
    PdfLoadFailedError,
    PdfNotAccessibleError,
    PdfNotFoundError,
    PdfWriteError,
)
from .io import PdfGraphWriter, load, load_batch
from .merge import MergeResult, MergeStatistics, Merger, merge, merge_pdfs

__all__ = [
    "__version__",
    "CompressionLevel",
    "DocumentMetadata",
    "MergeConfig",
    "MergeOptions",
    "OverwriteMode",
    "PageRange",
    "Rotation",
    "read_input_list",
    "ObjectGraph",
    "ObjectId",
    "PdfGraphWriter",
    "load",
    "load_batch",
    "Merger",
    "MergeResult",
    "MergeStatistics",
    "merge",
    "merge_pdfs",
    "PdfCatError",
    "PdfLoadError",
    "PdfNotFoundError",
    "PdfNotAccessibleError",
    "NotAFileError",
    "EncryptedPdfError",
    "CorruptedPdfError",
    "PdfLoadFailedError",
    "MergeFailedError",
    "InvalidPageRangeError",
    "BookmarkError",
    "MetadataError",
    "NoFilesToMergeError",
    "InvalidConfigError",
    "InputListError",
    "OutputExistsError",
    "PdfWriteError",
    "CancelledError",
]
