from __future__ import annotations

import pytest

from conftest import build_graph, label_pages, page_labels
from pdfcatx.config import PageRange, Rotation
from pdfcatx.core.model import ObjectId, Reference
from pdfcatx.exceptions import InvalidPageRangeError, MergeFailedError
from pdfcatx.merge.pages import extract, page_count, replace_kids, rotate_all, splice


class TestSplice:
    def test_appends_pages_and_updates_count(self) -> None:
        base = build_graph(2)
        base.objects[ObjectId(20)] = {"Parent": Reference.to(99)}

        splice(base, [ObjectId(20)])

        pages = base.objects[ObjectId(2)]
        assert pages["Kids"][-1] == Reference.to(20)
        assert pages["Count"] == 3
        assert base.objects[ObjectId(20)]["Parent"] == Reference.to(2)

    def test_missing_count_defaults_to_zero(self) -> None:
        base = build_graph(0)
        del base.objects[ObjectId(2)]["Count"]
        base.objects[ObjectId(10)] = {}

        splice(base, [ObjectId(10)])

        assert base.objects[ObjectId(2)]["Count"] == 1

    def test_missing_kids_fails(self) -> None:
        base = build_graph(1)
        del base.objects[ObjectId(2)]["Kids"]
        with pytest.raises(MergeFailedError, match="missing Kids"):
            splice(base, [ObjectId(3)])

    def test_kids_not_array_fails(self) -> None:
        base = build_graph(1)
        base.objects[ObjectId(2)]["Kids"] = Reference.to(3)
        with pytest.raises(MergeFailedError, match="Kids is not an array"):
            splice(base, [ObjectId(3)])

    def test_inconsistent_count_fails(self) -> None:
        base = build_graph(2)
        base.objects[ObjectId(2)]["Count"] = 5
        base.objects[ObjectId(10)] = {}
        with pytest.raises(MergeFailedError, match="Count"):
            splice(base, [ObjectId(10)])

    def test_missing_pages_reference_fails(self) -> None:
        base = build_graph(1)
        del base.objects[ObjectId(1)]["Pages"]
        with pytest.raises(MergeFailedError):
            splice(base, [ObjectId(3)])


def test_replace_kids_sets_count() -> None:
    graph = build_graph(3)
    replace_kids(graph, [ObjectId(5), ObjectId(3)])

    assert graph.get_pages() == {1: ObjectId(5), 2: ObjectId(3)}
    assert graph.objects[ObjectId(2)]["Count"] == 2


class TestExtract:
    def test_leading_span(self) -> None:
        graph = label_pages(build_graph(5), "p")

        result = extract(graph, PageRange.parse("1-2"))

        assert page_count(result) == 2
        assert page_labels(result) == ["p1", "p2"]
        assert graph.page_count == 5

    def test_union_is_sorted_and_deduplicated(self) -> None:
        graph = label_pages(build_graph(5), "p")

        result = extract(graph, PageRange.parse("5,2-3,3"))

        assert page_labels(result) == ["p2", "p3", "p5"]
        assert result.objects[ObjectId(2)]["Count"] == 3

    def test_out_of_range_fails_with_total(self) -> None:
        graph = build_graph(5)
        with pytest.raises(InvalidPageRangeError) as excinfo:
            extract(graph, PageRange.parse("1-1000"))
        assert excinfo.value.total == 5
        assert excinfo.value.requested == "1-1000"

    def test_document_without_pages_fails(self) -> None:
        graph = build_graph(0)
        with pytest.raises(InvalidPageRangeError):
            extract(graph, PageRange.parse("1"))


class TestRotateAll:
    def test_adds_to_existing_rotation(self) -> None:
        graph = build_graph(2)
        graph.objects[ObjectId(3)]["Rotate"] = 270

        rotate_all(graph, Rotation.CLOCKWISE_180)

        assert graph.objects[ObjectId(3)]["Rotate"] == 90
        assert graph.objects[ObjectId(4)]["Rotate"] == 180

    @pytest.mark.parametrize("initial", [0, 90, 180, 270])
    def test_two_quarter_turns_equal_a_half_turn(self, initial: int) -> None:
        twice = build_graph(1)
        once = build_graph(1)
        twice.objects[ObjectId(3)]["Rotate"] = initial
        once.objects[ObjectId(3)]["Rotate"] = initial

        rotate_all(twice, 90)
        rotate_all(twice, 90)
        rotate_all(once, 180)

        assert twice.objects[ObjectId(3)]["Rotate"] == once.objects[ObjectId(3)]["Rotate"]

    def test_zero_is_a_no_op(self) -> None:
        graph = build_graph(1)
        rotate_all(graph, 0)
        assert "Rotate" not in graph.objects[ObjectId(3)]

    def test_non_dictionary_page_fails(self) -> None:
        graph = build_graph(1)
        graph.objects[ObjectId(3)] = [0, 0, 1, 1]
        with pytest.raises(MergeFailedError):
            rotate_all(graph, 90)
