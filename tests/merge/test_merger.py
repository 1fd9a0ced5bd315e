from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from conftest import build_graph, label_pages, make_source, page_labels
from pdfcatx.config import CompressionLevel, DocumentMetadata, MergeOptions
from pdfcatx.core.model import Name, ObjectId, Reference, Stream, iter_references
from pdfcatx.exceptions import (
    CorruptedPdfError,
    InvalidPageRangeError,
    NoFilesToMergeError,
    PdfNotFoundError,
)
from pdfcatx.io.reader import LoadResult, LoadStatistics
from pdfcatx.merge.bookmarks import outline_items
from pdfcatx.merge.metadata import get_metadata
from pdfcatx.merge.merger import Merger, merge_pdfs


def ok(graph, name: str) -> LoadResult:
    source = make_source(graph, name)
    return LoadResult(path=source.path, source=source)


def failed(name: str) -> LoadResult:
    path = Path("/tmp") / name
    return LoadResult(path=path, error=PdfNotFoundError(path))


def assert_canonical(graph) -> None:
    ids = sorted(graph.objects)
    assert ids == [ObjectId(number) for number in range(1, len(ids) + 1)]
    assert graph.max_id == len(ids)
    assert graph.dangling_references() == []


@pytest.mark.parametrize(("a", "b"), [(1, 1), (1, 4), (3, 2), (5, 5)])
def test_merging_two_sources_adds_page_counts(a: int, b: int) -> None:
    results = [ok(build_graph(a), "a.pdf"), ok(build_graph(b), "b.pdf")]

    merged = Merger().merge_loaded(results, MergeOptions())

    assert merged.graph.page_count == a + b
    assert merged.statistics.files_merged == 2
    assert merged.statistics.total_pages == a + b
    assert_canonical(merged.graph)


def test_pages_keep_source_order() -> None:
    results = [
        ok(label_pages(build_graph(2), "a"), "a.pdf"),
        ok(label_pages(build_graph(3), "b"), "b.pdf"),
        ok(label_pages(build_graph(1), "c"), "c.pdf"),
    ]

    merged = Merger().merge_loaded(results, MergeOptions())

    assert page_labels(merged.graph) == ["a1", "a2", "b1", "b2", "b3", "c1"]
    pages_root = merged.graph.resolve_catalog()["Pages"]
    for page_id in merged.graph.get_pages().values():
        assert merged.graph.objects[page_id]["Parent"] == pages_root


def test_single_source_keeps_page_count() -> None:
    merged = Merger().merge_loaded([ok(build_graph(4), "only.pdf")], MergeOptions())

    assert merged.graph.page_count == 4
    assert merged.statistics.files_merged == 1
    assert_canonical(merged.graph)


def test_inputs_are_not_mutated() -> None:
    graph = build_graph(2)
    before = graph.clone()

    Merger().merge_loaded([ok(graph, "a.pdf"), ok(build_graph(1), "b.pdf")], MergeOptions(rotation=90))

    assert graph.objects == before.objects


def test_bookmarks_point_at_each_source() -> None:
    results = [
        ok(label_pages(build_graph(1), "A"), "doc_a.pdf"),
        ok(label_pages(build_graph(1), "B"), "doc_b.pdf"),
    ]

    merged = Merger().merge_loaded(results, MergeOptions(bookmarks=True))

    graph = merged.graph
    items = outline_items(graph)
    assert graph.page_count == 2
    assert [item.title for item in items] == ["doc_a.pdf", "doc_b.pdf"]
    assert [graph.objects[item.page_id]["Label"] for item in items] == ["A1", "B1"]
    assert merged.statistics.bookmarks_added == 2
    assert_canonical(graph)


def test_missing_object_in_base_does_not_alias_absorbed_objects() -> None:
    base = label_pages(build_graph(1), "A")
    base.objects[ObjectId(3)]["Annots"] = [Reference.to(4)]
    results = [ok(base, "a.pdf"), ok(label_pages(build_graph(1), "B"), "b.pdf")]

    merged = Merger().merge_loaded(results, MergeOptions())

    graph = merged.graph
    first_page = graph.objects[graph.get_pages()[1]]
    assert first_page["Label"] == "A1"
    assert first_page["Annots"] == [None]
    assert_canonical(graph)


def test_page_range_applies_to_every_source() -> None:
    results = [ok(label_pages(build_graph(2), f"s{index}-"), f"copy{index}.pdf") for index in range(3)]

    merged = Merger().merge_loaded(results, MergeOptions(page_range="1"))

    assert merged.graph.page_count == 3
    assert page_labels(merged.graph) == ["s0-1", "s1-1", "s2-1"]


def test_page_range_past_a_source_reports_that_source() -> None:
    results = [ok(build_graph(5), "long.pdf"), ok(build_graph(1), "short.pdf")]

    with pytest.raises(InvalidPageRangeError) as excinfo:
        Merger().merge_loaded(results, MergeOptions(page_range="1-3"))

    assert excinfo.value.total == 1
    assert excinfo.value.path == Path("/tmp/short.pdf")


def test_rotation_applies_to_every_page() -> None:
    results = [ok(build_graph(1), "a.pdf"), ok(build_graph(2), "b.pdf")]

    merged = Merger().merge_loaded(results, MergeOptions(rotation=270))

    rotations = [merged.graph.objects[page_id]["Rotate"] for page_id in merged.graph.get_pages().values()]
    assert rotations == [270, 270, 270]


@pytest.mark.parametrize("failures", [1, 2])
def test_continue_on_error_skips_failed_sources(failures: int) -> None:
    results = [ok(build_graph(1), "good.pdf")]
    results += [failed(f"missing{index}.pdf") for index in range(failures)]
    results.append(ok(build_graph(2), "also_good.pdf"))

    merged = Merger().merge_loaded(results, MergeOptions(continue_on_error=True))

    assert merged.statistics.files_merged == 2
    assert merged.statistics.skipped == failures
    assert len(merged.warnings) == failures
    assert "missing0.pdf" in merged.warnings[0]
    assert merged.merged_files == [Path("/tmp/good.pdf"), Path("/tmp/also_good.pdf")]


def test_continue_on_error_with_every_source_failing() -> None:
    results = [failed("a.pdf"), failed("b.pdf")]
    with pytest.raises(NoFilesToMergeError):
        Merger().merge_loaded(results, MergeOptions(continue_on_error=True))


def test_first_failure_aborts_without_continue_on_error() -> None:
    results = [ok(build_graph(1), "good.pdf"), failed("missing.pdf")]
    with pytest.raises(PdfNotFoundError):
        Merger().merge_loaded(results, MergeOptions())


def test_no_sources_fails() -> None:
    with pytest.raises(NoFilesToMergeError):
        Merger().merge_loaded([], MergeOptions())


def test_metadata_is_written() -> None:
    options = MergeOptions(metadata=DocumentMetadata(title="Combined", author="Team"))

    merged = Merger().merge_loaded([ok(build_graph(1), "a.pdf")], options)

    metadata = get_metadata(merged.graph)
    assert metadata.title == "Combined"
    assert metadata.author == "Team"
    assert_canonical(merged.graph)


def _content_streams(graph) -> list[Stream]:
    return [value for value in graph.objects.values() if isinstance(value, Stream)]


def test_compression_none_leaves_streams() -> None:
    results = [ok(build_graph(2, with_content=True), "a.pdf")]

    merged = Merger().merge_loaded(results, MergeOptions(compression=CompressionLevel.NONE))

    assert all(not stream.filters for stream in _content_streams(merged.graph))
    assert merged.statistics.compressed is False


def test_compression_standard_encodes_streams() -> None:
    results = [ok(build_graph(2, with_content=True), "a.pdf")]

    merged = Merger().merge_loaded(results, MergeOptions(compression="standard"))

    assert all(stream.filters == ["FlateDecode"] for stream in _content_streams(merged.graph))
    assert merged.statistics.compressed is True


def test_compression_maximum_prunes_absorbed_catalogs() -> None:
    results = [ok(build_graph(1), "a.pdf"), ok(build_graph(1), "b.pdf")]

    standard = Merger().merge_loaded(results, MergeOptions(compression=CompressionLevel.STANDARD))
    maximum = Merger().merge_loaded(results, MergeOptions(compression=CompressionLevel.MAXIMUM))

    def catalogs(graph) -> int:
        return sum(
            1
            for value in graph.objects.values()
            if isinstance(value, dict) and value.get("Type") == Name("Catalog")
        )

    assert catalogs(standard.graph) == 2
    assert catalogs(maximum.graph) == 1
    assert len(maximum.graph) == 4
    assert_canonical(maximum.graph)


def test_merge_uses_injected_loader() -> None:
    calls: list[tuple] = []

    def loader(paths, workers, progress=None):
        calls.append((list(paths), workers))
        results = [ok(build_graph(1), Path(path).name) for path in paths]
        return results, LoadStatistics.from_results(results, 0.5)

    merged = Merger(loader=loader).merge(["x.pdf", "y.pdf"], MergeOptions(jobs=2))

    assert calls == [(["x.pdf", "y.pdf"], 2)]
    assert merged.statistics.load_time == 0.5
    assert merged.statistics.input_size == 2000


def test_every_reference_resolves_after_a_real_merge(pdf_factory: Callable[..., Path]) -> None:
    inputs = [pdf_factory("one.pdf", pages=2), pdf_factory("two.pdf", pages=3, title="Two")]

    merged = Merger().merge(inputs, MergeOptions(bookmarks=True))

    graph = merged.graph
    assert graph.page_count == 5
    for value in graph.objects.values():
        for target in iter_references(value):
            assert target in graph
    assert_canonical(graph)


def test_merge_pdfs_writes_output(tmp_path: Path, sample_pdfs: list[Path]) -> None:
    output = tmp_path / "merged.pdf"

    result = merge_pdfs(sample_pdfs, output)

    assert result == output.resolve()
    assert output.exists()


def test_merge_pdfs_reports_corrupted_input(tmp_path: Path, corrupted_pdf: Path, sample_pdf: Path) -> None:
    with pytest.raises(CorruptedPdfError):
        merge_pdfs([sample_pdf, corrupted_pdf], tmp_path / "out.pdf")
    assert not (tmp_path / "out.pdf").exists()
