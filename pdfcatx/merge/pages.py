"""Page tree operations: splicing, extraction and rotation."""

from __future__ import annotations

import logging
from typing import Sequence

from ..config import PageRange, Rotation
from ..core.graph import ObjectGraph
from ..core.model import ObjectId, PdfDictionary, Reference, Stream, get_int
from ..exceptions import InvalidPageRangeError, MergeFailedError

LOGGER = logging.getLogger("pdfcatx.merge")


def _kids_of(pages: PdfDictionary) -> list:
    kids = pages.get("Kids")
    if kids is None:
        raise MergeFailedError("Pages dictionary missing Kids array")
    if not isinstance(kids, list):
        raise MergeFailedError("Kids is not an array")
    return kids


def _check_count(pages: PdfDictionary) -> None:
    kids = _kids_of(pages)
    if get_int(pages, "Count") != len(kids):
        raise MergeFailedError(
            f"Page tree Count {pages.get('Count')!r} does not match {len(kids)} kid(s)"
        )


def splice(base: ObjectGraph, new_page_ids: Sequence[ObjectId]) -> None:
    """Append *new_page_ids* to the Kids array of *base*'s Pages root.

    ``Count`` becomes the previous count plus the number of appended pages and
    each appended page is re-parented onto the root.

    Raises:
        MergeFailedError: If the catalog, the Pages reference or the Pages
            dictionary cannot be resolved, or if Kids is not an array.
    """

    pages_id, pages = base.pages_root()
    kids = _kids_of(pages)

    for page_id in new_page_ids:
        kids.append(Reference(page_id))
        page = base.objects.get(page_id)
        if isinstance(page, dict):
            page["Parent"] = Reference(pages_id)

    current_count = get_int(pages, "Count") or 0
    pages["Count"] = current_count + len(new_page_ids)
    _check_count(pages)
    LOGGER.debug("Spliced %d page(s) into page tree %s", len(new_page_ids), pages_id)


def replace_kids(graph: ObjectGraph, page_ids: Sequence[ObjectId]) -> None:
    """Replace the Kids array of *graph*'s Pages root with exactly *page_ids*."""

    _, pages = graph.pages_root()
    pages["Kids"] = [Reference(page_id) for page_id in page_ids]
    pages["Count"] = len(page_ids)


def extract(graph: ObjectGraph, page_range: PageRange) -> ObjectGraph:
    """Return a copy of *graph* whose page tree holds only the pages in *page_range*.

    Pages keep their relative order. Unselected page objects remain in the
    graph, unreachable, until a pruning pass removes them.

    Raises:
        InvalidPageRangeError: If any requested page exceeds the page count.
        MergeFailedError: If nothing is selected or the page tree is broken.
    """

    all_pages = graph.get_pages()
    max_pages = len(all_pages)

    requested = page_range.pages()
    if any(page > max_pages for page in requested):
        raise InvalidPageRangeError(str(page_range), max_pages)

    selected = [all_pages[page] for page in requested if page in all_pages]
    if not selected:
        raise MergeFailedError("No pages in range")

    extracted = graph.clone()
    replace_kids(extracted, selected)
    LOGGER.debug("Extracted %d of %d page(s) using range %s", len(selected), max_pages, page_range)
    return extracted


def rotate_all(graph: ObjectGraph, degrees: int | Rotation) -> None:
    """Add *degrees* to the ``Rotate`` entry of every page, modulo 360."""

    delta = int(degrees)
    if delta % 360 == 0:
        return

    for page_id in graph.get_pages().values():
        page = graph.resolve(page_id)
        if isinstance(page, Stream) or not isinstance(page, dict):
            raise MergeFailedError("Page object is not a dictionary")
        current = get_int(page, "Rotate") or 0
        page["Rotate"] = (current + delta) % 360
    LOGGER.debug("Rotated %d page(s) by %d degrees", graph.page_count, delta)


def page_count(graph: ObjectGraph) -> int:
    return len(graph.get_pages())


__all__ = ["splice", "replace_kids", "extract", "rotate_all", "page_count"]
