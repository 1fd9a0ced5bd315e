"""Object identifier renumbering for :mod:`pdfcatx.merge`."""

from __future__ import annotations

import logging

from ..core.graph import ObjectGraph
from ..core.model import ObjectId, PdfObject, Reference, map_references

LOGGER = logging.getLogger("pdfcatx.merge")


def renumber(graph: ObjectGraph, starting_at: int = 1) -> ObjectGraph:
    """Give every object in *graph* a fresh identifier starting at *starting_at*.

    Identifiers are assigned in ascending ``(number, generation)`` order, all
    with generation 0, and every reference in the objects and the trailer is
    rewritten to match. References to identifiers that do not exist in the
    graph become ``null`` so they cannot alias one of the new identifiers.

    The graph is modified in place and returned for convenience. Afterwards
    ``graph.max_id == starting_at + len(graph.objects) - 1``.
    """

    if starting_at < 1:
        raise ValueError("Object numbers start at 1")

    mapping: dict[ObjectId, ObjectId] = {
        old: ObjectId(starting_at + index, 0)
        for index, old in enumerate(sorted(graph.objects))
    }

    def _remap(object_id: ObjectId) -> PdfObject:
        new_id = mapping.get(object_id)
        if new_id is None:
            LOGGER.debug("Dropping dangling reference to %s", object_id)
            return None
        return Reference(new_id)

    graph.objects = {
        mapping[old]: map_references(value, _remap)
        for old, value in sorted(graph.objects.items())
    }
    graph.trailer = map_references(graph.trailer, _remap)  # type: ignore[assignment]
    graph.max_id = starting_at + len(mapping) - 1
    LOGGER.debug(
        "Renumbered %d object(s) into %d..%d",
        len(mapping),
        starting_at,
        graph.max_id,
    )
    return graph


__all__ = ["renumber"]
