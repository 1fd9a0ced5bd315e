"""Merge engine for the :mod:`pdfcatx` package."""

from __future__ import annotations

from .bookmarks import (
    add_bookmarks,
    add_bookmarks_for_files,
    bookmark_targets,
    has_bookmarks,
    outline_items,
    remove_bookmarks,
)
from .merger import MergeResult, MergeStatistics, Merger, merge, merge_pdfs
from .metadata import clear_metadata, format_pdf_date, get_metadata, has_metadata, set_metadata
from .pages import extract, page_count, replace_kids, rotate_all, splice
from .renumber import renumber

__all__ = [
    "Merger",
    "MergeResult",
    "MergeStatistics",
    "merge",
    "merge_pdfs",
    "renumber",
    "splice",
    "replace_kids",
    "extract",
    "rotate_all",
    "page_count",
    "add_bookmarks",
    "add_bookmarks_for_files",
    "bookmark_targets",
    "has_bookmarks",
    "remove_bookmarks",
    "outline_items",
    "set_metadata",
    "get_metadata",
    "has_metadata",
    "clear_metadata",
    "format_pdf_date",
]
