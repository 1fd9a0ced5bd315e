"""Document information (``/Info``) handling for merged documents."""

from __future__ import annotations

import logging
import time
from typing import Optional

from ..config import DocumentMetadata
from ..core.graph import ObjectGraph
from ..core.model import PdfDictionary, Reference, Stream, get_reference
from ..exceptions import MetadataError

LOGGER = logging.getLogger("pdfcatx.merge")

PRODUCER = "pdfcatx"

# Fixed-length approximations; the stamp is provenance, not a calendar date.
_SECONDS_PER_YEAR = 31_556_926
_SECONDS_PER_MONTH = 2_629_743
_SECONDS_PER_DAY = 86_400


def format_pdf_date(timestamp: Optional[float] = None) -> str:
    """Render *timestamp* (seconds since the epoch) as ``D:YYYYMMDDHHMMSSZ``."""

    seconds = int(time.time() if timestamp is None else timestamp)
    seconds = max(seconds, 0)

    year = 1970 + seconds // _SECONDS_PER_YEAR
    remaining = seconds % _SECONDS_PER_YEAR
    month = 1 + min(remaining // _SECONDS_PER_MONTH, 11)
    day_remaining = remaining % _SECONDS_PER_MONTH
    day = 1 + min(day_remaining // _SECONDS_PER_DAY, 30)
    day_seconds = day_remaining % _SECONDS_PER_DAY
    hour = day_seconds // 3600
    minute = (day_seconds % 3600) // 60
    second = day_seconds % 60
    return f"D:{year:04d}{month:02d}{day:02d}{hour:02d}{minute:02d}{second:02d}Z"


def _find_info(graph: ObjectGraph) -> Optional[PdfDictionary]:
    info_id = get_reference(graph.trailer, "Info")
    if info_id is None:
        return None
    info = graph.objects.get(info_id)
    return info if isinstance(info, dict) else None


def _ensure_info(graph: ObjectGraph) -> PdfDictionary:
    info_id = get_reference(graph.trailer, "Info")
    if info_id is None:
        info_id = graph.allocate_id()
        graph.trailer["Info"] = Reference(info_id)

    info = graph.objects.get(info_id)
    if isinstance(info, dict):
        return info
    if isinstance(info, Stream):
        raise MetadataError(f"Info entry {info_id} is a stream, not a dictionary")
    info = {}
    graph.objects[info_id] = info
    return info


def set_metadata(
    graph: ObjectGraph,
    fields: DocumentMetadata,
    now: Optional[float] = None,
) -> bool:
    """Write *fields* into the Info dictionary and stamp the producer.

    Does nothing and returns ``False`` when every field is empty. Otherwise the
    Info dictionary is created if missing, each non-empty field is written and
    ``Creator``, ``Producer``, ``CreationDate`` and ``ModDate`` are always
    overwritten.
    """

    if fields.is_empty():
        return False

    info = _ensure_info(graph)

    for key, value in fields.items():
        info[key] = value

    stamp = format_pdf_date(now)
    info["Creator"] = PRODUCER
    info["Producer"] = PRODUCER
    info["CreationDate"] = stamp
    info["ModDate"] = stamp
    LOGGER.debug("Set metadata fields: %s", ", ".join(key for key, _ in fields.items()))
    return True


def get_metadata(graph: ObjectGraph) -> DocumentMetadata:
    info = _find_info(graph)
    if info is None:
        return DocumentMetadata()

    def _text(key: str) -> Optional[str]:
        value = info.get(key)
        if isinstance(value, bytes):
            return value.decode("utf-8", errors="replace")
        return value if isinstance(value, str) else None

    return DocumentMetadata(
        title=_text("Title"),
        author=_text("Author"),
        subject=_text("Subject"),
        keywords=_text("Keywords"),
    )


def has_metadata(graph: ObjectGraph) -> bool:
    return "Info" in graph.trailer


def clear_metadata(graph: ObjectGraph) -> None:
    """Remove the Info dictionary and its trailer entry."""

    info_id = get_reference(graph.trailer, "Info")
    if info_id is not None:
        graph.objects.pop(info_id, None)
    graph.trailer.pop("Info", None)


__all__ = [
    "PRODUCER",
    "format_pdf_date",
    "set_metadata",
    "get_metadata",
    "has_metadata",
    "clear_metadata",
]
