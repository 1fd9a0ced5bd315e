"""In-memory object graph for a single PDF document."""

from __future__ import annotations

import copy
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, Iterator

from pypdf.filters import FlateDecode

from ..exceptions import MergeFailedError
from .model import (
    Name,
    ObjectId,
    PdfDictionary,
    PdfObject,
    Reference,
    Stream,
    ensure_pdf_object,
    get_reference,
    iter_references,
    map_references,
)

LOGGER = logging.getLogger("pdfcatx.core")

_FLATE = Name("FlateDecode")

__all__ = ["ObjectGraph"]


@dataclass
class ObjectGraph:
    """Objects addressed by :class:`ObjectId` plus the trailer.

    ``max_id`` is the allocation watermark: every identifier handed out by
    :meth:`allocate_id` is strictly greater than any number already in use.
    """

    objects: Dict[ObjectId, PdfObject] = field(default_factory=dict)
    trailer: PdfDictionary = field(default_factory=dict)
    max_id: int = 0
    version: str = "1.7"

    def __post_init__(self) -> None:
        highest = max((object_id.number for object_id in self.objects), default=0)
        self.max_id = max(self.max_id, highest)

    # -- Lookup --------------------------------------------------------------

    def __contains__(self, object_id: object) -> bool:
        return object_id in self.objects

    def __len__(self) -> int:
        return len(self.objects)

    def resolve(self, object_id: ObjectId) -> PdfObject:
        """Return the object stored under *object_id*."""

        try:
            return self.objects[object_id]
        except KeyError:
            raise MergeFailedError(f"Object {object_id} not found") from None

    def resolve_dictionary(self, object_id: ObjectId, what: str = "object") -> PdfDictionary:
        value = self.resolve(object_id)
        if isinstance(value, Stream):
            return value.dictionary
        if not isinstance(value, dict):
            raise MergeFailedError(f"{what.capitalize()} {object_id} is not a dictionary")
        return value

    def catalog_id(self) -> ObjectId:
        root = get_reference(self.trailer, "Root")
        if root is None:
            raise MergeFailedError("Failed to get catalog: trailer has no Root reference")
        return root

    def resolve_catalog(self) -> PdfDictionary:
        """Return the document catalog dictionary."""

        root = self.catalog_id()
        try:
            return self.resolve_dictionary(root, "catalog")
        except MergeFailedError as exc:
            raise MergeFailedError(f"Failed to get catalog: {exc.reason}") from None

    def pages_root(self) -> tuple[ObjectId, PdfDictionary]:
        """Return the identifier and dictionary of the catalog's Pages root."""

        catalog = self.resolve_catalog()
        pages_id = get_reference(catalog, "Pages")
        if pages_id is None:
            raise MergeFailedError("Failed to get pages reference")
        pages = self.objects.get(pages_id)
        if pages is None:
            raise MergeFailedError(f"Failed to get pages object: {pages_id} not found")
        if not isinstance(pages, dict):
            raise MergeFailedError("Pages object is not a dictionary")
        return pages_id, pages

    def get_pages(self) -> dict[int, ObjectId]:
        """Return page number (1-indexed) to page identifier, in Kids order.

        Only the first level of the page tree is enumerated; the loader
        flattens nested trees so every page hangs directly off the root.
        """

        try:
            _, pages = self.pages_root()
        except MergeFailedError:
            return {}
        kids = pages.get("Kids")
        if not isinstance(kids, list):
            return {}
        result: dict[int, ObjectId] = {}
        for kid in kids:
            if isinstance(kid, Reference) and kid.id in self.objects:
                result[len(result) + 1] = kid.id
        return result

    @property
    def page_count(self) -> int:
        return len(self.get_pages())

    # -- Mutation ------------------------------------------------------------

    def allocate_id(self) -> ObjectId:
        """Reserve and return a fresh identifier."""

        self.max_id += 1
        return ObjectId(self.max_id, 0)

    def add_object(self, value: PdfObject) -> ObjectId:
        ensure_pdf_object(value)
        object_id = self.allocate_id()
        self.objects[object_id] = value
        return object_id

    def clone(self) -> "ObjectGraph":
        return copy.deepcopy(self)

    # -- Integrity -----------------------------------------------------------

    def iter_all_references(self) -> Iterator[tuple[ObjectId | None, ObjectId]]:
        """Yield ``(owner, target)`` pairs; the owner of trailer entries is ``None``."""

        for target in iter_references(self.trailer):
            yield None, target
        for owner, value in self.objects.items():
            for target in iter_references(value):
                yield owner, target

    def dangling_references(self) -> list[tuple[ObjectId | None, ObjectId]]:
        return [
            (owner, target)
            for owner, target in self.iter_all_references()
            if target not in self.objects
        ]

    def drop_dangling_references(self) -> int:
        """Replace references to missing objects with null; return the number of missing ids."""

        dangling = {target for _, target in self.dangling_references()}
        if not dangling:
            return 0

        def _resolve(object_id: ObjectId) -> PdfObject:
            return None if object_id in dangling else Reference(object_id)

        self.objects = {
            object_id: map_references(value, _resolve)
            for object_id, value in self.objects.items()
        }
        self.trailer = map_references(self.trailer, _resolve)  # type: ignore[assignment]
        LOGGER.debug("Dropped references to %d missing object(s)", len(dangling))
        return len(dangling)

    def reachable_ids(self) -> set[ObjectId]:
        seen: set[ObjectId] = set()
        queue = deque(iter_references(self.trailer))
        while queue:
            object_id = queue.popleft()
            if object_id in seen or object_id not in self.objects:
                continue
            seen.add(object_id)
            queue.extend(iter_references(self.objects[object_id]))
        return seen

    # -- Compaction ----------------------------------------------------------

    def compact(self) -> int:
        """Flate-encode unfiltered streams when that makes them smaller.

        Returns the number of streams that were compressed.
        """

        compressed = 0
        for object_id, value in self.objects.items():
            if not isinstance(value, Stream) or value.filters or not value.data:
                continue
            encoded = FlateDecode.encode(value.data)
            if len(encoded) >= len(value.data):
                continue
            value.data = encoded
            value.dictionary.pop("DecodeParms", None)
            value.dictionary["Filter"] = _FLATE
            compressed += 1
            LOGGER.debug("Compressed stream %s", object_id)
        LOGGER.debug("Compressed %d stream(s)", compressed)
        return compressed

    def prune_unreachable(self) -> int:
        """Remove objects not reachable from the trailer; return how many."""

        reachable = self.reachable_ids()
        unreachable = [object_id for object_id in self.objects if object_id not in reachable]
        for object_id in unreachable:
            del self.objects[object_id]
        LOGGER.debug("Pruned %d unreachable object(s)", len(unreachable))
        return len(unreachable)

