from __future__ import annotations

import pytest

from pdfcatx.core.model import (
    Name,
    ObjectId,
    Reference,
    Stream,
    ensure_pdf_object,
    get_int,
    get_name,
    get_reference,
    iter_references,
    map_references,
)


def test_object_id_defaults_to_generation_zero() -> None:
    assert ObjectId(7) == ObjectId(7, 0)
    assert str(ObjectId(7, 2)) == "7 2 R"


def test_ids_sort_by_number_then_generation() -> None:
    ids = [ObjectId(3, 1), ObjectId(1, 0), ObjectId(3, 0)]
    assert sorted(ids) == [ObjectId(1, 0), ObjectId(3, 0), ObjectId(3, 1)]


def test_iter_references_finds_nested_and_stream_references() -> None:
    value = {
        "A": Reference.to(1),
        "B": [Reference.to(2), {"C": Reference.to(3)}],
        "D": Stream({"Font": Reference.to(4)}, b"data"),
        "E": Name("X"),
    }
    assert sorted(iter_references(value)) == [ObjectId(n) for n in (1, 2, 3, 4)]


def test_map_references_rebuilds_containers() -> None:
    original = {"Kids": [Reference.to(1), Reference.to(2)], "Count": 2}
    mapped = map_references(original, lambda oid: Reference.to(oid.number + 10))

    assert mapped == {"Kids": [Reference.to(11), Reference.to(12)], "Count": 2}
    assert original["Kids"][0] == Reference.to(1)


def test_map_references_keeps_stream_data() -> None:
    stream = Stream({"Parent": Reference.to(5)}, b"payload")
    mapped = map_references(stream, lambda oid: None)

    assert isinstance(mapped, Stream)
    assert mapped.dictionary == {"Parent": None}
    assert mapped.data == b"payload"


def test_stream_filters_accepts_name_or_array() -> None:
    assert Stream({"Filter": Name("FlateDecode")}).filters == ["FlateDecode"]
    assert Stream({"Filter": [Name("ASCII85Decode"), Name("FlateDecode")]}).filters == [
        "ASCII85Decode",
        "FlateDecode",
    ]
    assert Stream({}).filters == []


def test_ensure_pdf_object_rejects_foreign_types() -> None:
    assert ensure_pdf_object({"A": [1, 2.5, "x", b"y", None, True]}) is not None
    with pytest.raises(TypeError):
        ensure_pdf_object({"A": object()})
    with pytest.raises(TypeError):
        ensure_pdf_object({1: "not a name key"})


def test_typed_getters() -> None:
    dictionary = {"Type": Name("Page"), "Parent": Reference.to(2), "Count": 3, "Flag": True}

    assert get_name(dictionary, "Type") == "Page"
    assert get_name(dictionary, "Count") is None
    assert get_reference(dictionary, "Parent") == ObjectId(2)
    assert get_int(dictionary, "Count") == 3
    assert get_int(dictionary, "Flag") is None
    assert get_int({"Rotate": 90.0}, "Rotate") == 90
