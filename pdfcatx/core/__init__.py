"""PDF object model and object graph used throughout :mod:`pdfcatx`."""

from __future__ import annotations

from .graph import ObjectGraph
from .model import (
    Name,
    ObjectId,
    PdfDictionary,
    PdfObject,
    Reference,
    Stream,
    ensure_pdf_object,
    iter_references,
    map_references,
)

__all__ = [
    "ObjectGraph",
    "ObjectId",
    "Name",
    "Reference",
    "Stream",
    "PdfObject",
    "PdfDictionary",
    "ensure_pdf_object",
    "iter_references",
    "map_references",
]
