"""PDF object model shared by the loader, the merge engine and the writer.

Every PDF value is represented by a closed set of Python types:

* ``None`` for the null object,
* ``bool``, ``int`` and ``float`` for booleans, integers and reals,
* ``str`` for text strings and ``bytes`` for binary strings,
* :class:`Name` for name objects (stored without the leading slash),
* ``list`` for arrays and ``dict`` (keyed by name, without slash) for
  dictionaries,
* :class:`Reference` for indirect references,
* :class:`Stream` for a dictionary with an attached raw byte payload.

Anything else is rejected by :func:`ensure_pdf_object`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, NamedTuple, Union

__all__ = [
    "ObjectId",
    "Name",
    "Reference",
    "Stream",
    "PdfObject",
    "PdfDictionary",
    "ensure_pdf_object",
    "iter_references",
    "map_references",
    "get_name",
    "get_reference",
    "get_int",
]


class ObjectId(NamedTuple):
    """Identifier of an indirect object within one graph."""

    number: int
    generation: int = 0

    def __str__(self) -> str:
        return f"{self.number} {self.generation} R"


@dataclass(frozen=True, slots=True)
class Name:
    """A PDF name object such as ``/Type``."""

    value: str

    def __str__(self) -> str:
        return f"/{self.value}"


@dataclass(frozen=True, slots=True)
class Reference:
    """An indirect reference pointing to another object in the same graph."""

    id: ObjectId

    @classmethod
    def to(cls, number: int, generation: int = 0) -> "Reference":
        return cls(ObjectId(number, generation))


@dataclass(slots=True)
class Stream:
    """A stream object: a dictionary plus its raw (possibly encoded) bytes."""

    dictionary: Dict[str, Any] = field(default_factory=dict)
    data: bytes = b""

    @property
    def filters(self) -> list[str]:
        value = self.dictionary.get("Filter")
        if isinstance(value, Name):
            return [value.value]
        if isinstance(value, list):
            return [item.value for item in value if isinstance(item, Name)]
        return []


PdfObject = Union[
    None,
    bool,
    int,
    float,
    str,
    bytes,
    Name,
    Reference,
    Stream,
    List[Any],
    Dict[str, Any],
]
PdfDictionary = Dict[str, PdfObject]

_SCALARS = (bool, int, float, str, bytes, Name, Reference)


def ensure_pdf_object(value: Any) -> PdfObject:
    """Return *value* unchanged if it belongs to the object model.

    Raises:
        TypeError: If *value*, or anything nested inside it, is not one of the
            supported PDF object types.
    """

    if value is None or isinstance(value, _SCALARS):
        return value
    if isinstance(value, Stream):
        ensure_pdf_object(value.dictionary)
        return value
    if isinstance(value, list):
        for item in value:
            ensure_pdf_object(item)
        return value
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"Dictionary keys must be names, got {key!r}")
            ensure_pdf_object(item)
        return value
    raise TypeError(f"Unsupported PDF object type: {type(value).__name__}")


def iter_references(value: PdfObject) -> Iterator[ObjectId]:
    """Yield the identifier of every reference nested inside *value*."""

    if isinstance(value, Reference):
        yield value.id
    elif isinstance(value, Stream):
        yield from iter_references(value.dictionary)
    elif isinstance(value, list):
        for item in value:
            yield from iter_references(item)
    elif isinstance(value, dict):
        for item in value.values():
            yield from iter_references(item)


def map_references(
    value: PdfObject,
    transform: Callable[[ObjectId], PdfObject],
) -> PdfObject:
    """Return a copy of *value* with every reference replaced by ``transform(id)``.

    Containers are rebuilt; scalar values are shared since they are immutable.
    """

    if isinstance(value, Reference):
        return transform(value.id)
    if isinstance(value, Stream):
        return Stream(
            dictionary=map_references(value.dictionary, transform),  # type: ignore[arg-type]
            data=value.data,
        )
    if isinstance(value, list):
        return [map_references(item, transform) for item in value]
    if isinstance(value, dict):
        return {key: map_references(item, transform) for key, item in value.items()}
    return value


def get_name(dictionary: PdfDictionary, key: str) -> str | None:
    value = dictionary.get(key)
    return value.value if isinstance(value, Name) else None


def get_reference(dictionary: PdfDictionary, key: str) -> ObjectId | None:
    value = dictionary.get(key)
    return value.id if isinstance(value, Reference) else None


def get_int(dictionary: PdfDictionary, key: str) -> int | None:
    # bool is an int subclass but never a valid integer entry
    value = dictionary.get(key)
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None
