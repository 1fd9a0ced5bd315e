"""Outline (bookmark) construction for merged documents.

Outline items form a doubly linked list addressed by object identifiers:
each item carries ``Prev``/``Next`` references to its siblings and a
``Parent`` reference to the outline root, which in turn records the ends of
the chain in ``First`` and ``Last``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from ..core.graph import ObjectGraph
from ..core.model import Name, ObjectId, PdfDictionary, Reference, get_reference
from ..exceptions import BookmarkError, MergeFailedError

LOGGER = logging.getLogger("pdfcatx.merge")

TitledDestination = Tuple[str, ObjectId]


@dataclass(slots=True)
class OutlineEntry:
    """A read-only view of one outline item."""

    object_id: ObjectId
    title: str
    page_id: Optional[ObjectId]


def _catalog(graph: ObjectGraph) -> PdfDictionary:
    try:
        return graph.resolve_catalog()
    except MergeFailedError as exc:
        raise BookmarkError(f"Failed to get catalog: {exc.reason}") from None


def add_bookmarks(graph: ObjectGraph, titled_destinations: Sequence[TitledDestination]) -> int:
    """Attach a flat outline with one item per ``(title, page_id)`` pair.

    Any existing outline is replaced. Returns the number of items created.

    Raises:
        BookmarkError: If the document catalog cannot be resolved.
    """

    if not titled_destinations:
        return 0

    catalog = _catalog(graph)
    outline_id = graph.allocate_id()
    item_ids = [graph.allocate_id() for _ in titled_destinations]

    for index, ((title, page_id), item_id) in enumerate(zip(titled_destinations, item_ids)):
        item: PdfDictionary = {
            "Title": title,
            "Parent": Reference(outline_id),
            "Dest": [Reference(page_id), Name("XYZ"), None, None, None],
        }
        if index > 0:
            item["Prev"] = Reference(item_ids[index - 1])
        if index < len(item_ids) - 1:
            item["Next"] = Reference(item_ids[index + 1])
        graph.objects[item_id] = item

    graph.objects[outline_id] = {
        "Type": Name("Outlines"),
        "Count": len(item_ids),
        "First": Reference(item_ids[0]),
        "Last": Reference(item_ids[-1]),
    }
    catalog["Outlines"] = Reference(outline_id)
    LOGGER.debug("Added %d bookmark(s) under outline %s", len(item_ids), outline_id)
    return len(item_ids)


def bookmark_targets(graph: ObjectGraph, paths: Sequence[Path]) -> List[TitledDestination]:
    """Pick one destination page per source file.

    The merged page count is divided evenly between the sources, so file ``i``
    points at page index ``i * (total // len(paths))``. With uneven sources the
    target is an estimate and may land inside a neighbouring file.
    """

    pages = list(graph.get_pages().values())
    if not pages or not paths:
        return []

    pages_per_file = len(pages) // len(paths) if len(paths) > 1 else len(pages)
    targets: List[TitledDestination] = []
    for file_index, path in enumerate(paths):
        page_index = file_index * pages_per_file
        if page_index >= len(pages):
            break
        title = Path(path).name or "Untitled"
        targets.append((title, pages[page_index]))
    return targets


def add_bookmarks_for_files(graph: ObjectGraph, paths: Sequence[Path]) -> int:
    """Add one bookmark per file, titled with the file name."""

    return add_bookmarks(graph, bookmark_targets(graph, paths))


def has_bookmarks(graph: ObjectGraph) -> bool:
    try:
        catalog = graph.resolve_catalog()
    except MergeFailedError:
        return False
    return "Outlines" in catalog


def remove_bookmarks(graph: ObjectGraph) -> None:
    """Detach the outline from the catalog.

    The outline objects stay in the graph until unreachable objects are pruned.
    """

    catalog = _catalog(graph)
    catalog.pop("Outlines", None)


def outline_items(graph: ObjectGraph) -> List[OutlineEntry]:
    """Return the top-level outline items in ``First``/``Next`` order.

    Raises:
        BookmarkError: If the catalog is unusable or the chain loops.
    """

    catalog = _catalog(graph)
    outline_id = get_reference(catalog, "Outlines")
    if outline_id is None or outline_id not in graph:
        return []
    outline = graph.objects[outline_id]
    if not isinstance(outline, dict):
        raise BookmarkError("Outline root is not a dictionary")

    entries: List[OutlineEntry] = []
    seen: set[ObjectId] = set()
    current = get_reference(outline, "First")
    while current is not None:
        if current in seen:
            raise BookmarkError(f"Outline chain loops back to {current}")
        seen.add(current)
        item = graph.objects.get(current)
        if not isinstance(item, dict):
            break
        dest = item.get("Dest")
        page_id = None
        if isinstance(dest, list) and dest and isinstance(dest[0], Reference):
            page_id = dest[0].id
        title = item.get("Title")
        entries.append(
            OutlineEntry(
                object_id=current,
                title=title if isinstance(title, str) else "",
                page_id=page_id,
            )
        )
        current = get_reference(item, "Next")
    return entries


__all__ = [
    "OutlineEntry",
    "TitledDestination",
    "add_bookmarks",
    "bookmark_targets",
    "add_bookmarks_for_files",
    "has_bookmarks",
    "remove_bookmarks",
    "outline_items",
]
