from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest
from pypdf import PdfWriter

from pdfcatx.core.graph import ObjectGraph
from pdfcatx.core.model import Name, ObjectId, Reference, Stream
from pdfcatx.io.reader import LoadedSource


def build_graph(page_count: int, first_id: int = 1, with_content: bool = False) -> ObjectGraph:
    """Build a flat single-level document: catalog, page tree root and pages."""

    catalog_id = ObjectId(first_id)
    pages_id = ObjectId(first_id + 1)
    objects: dict = {}
    kids = []
    next_number = first_id + 2
    for index in range(page_count):
        page_id = ObjectId(next_number)
        next_number += 1
        page = {
            "Type": Name("Page"),
            "Parent": Reference(pages_id),
            "MediaBox": [0, 0, 612, 792],
            "Resources": {},
        }
        if with_content:
            content_id = ObjectId(next_number)
            next_number += 1
            objects[content_id] = Stream({}, f"BT /F1 12 Tf (Page {index + 1}) Tj ET\n".encode() * 20)
            page["Contents"] = Reference(content_id)
        objects[page_id] = page
        kids.append(Reference(page_id))

    objects[catalog_id] = {"Type": Name("Catalog"), "Pages": Reference(pages_id)}
    objects[pages_id] = {"Type": Name("Pages"), "Kids": kids, "Count": page_count}
    return ObjectGraph(objects=objects, trailer={"Root": Reference(catalog_id)})


def make_source(graph: ObjectGraph, name: str = "doc.pdf", file_size: int = 1000) -> LoadedSource:
    return LoadedSource(
        graph=graph,
        path=Path("/tmp") / name,
        page_count=graph.page_count,
        file_size=file_size,
        load_time=0.01,
    )


def page_labels(graph: ObjectGraph) -> list[str]:
    """Return the ``Label`` entry of every page in page-tree order."""

    return [graph.objects[page_id]["Label"] for page_id in graph.get_pages().values()]


def label_pages(graph: ObjectGraph, prefix: str) -> ObjectGraph:
    for number, page_id in graph.get_pages().items():
        graph.objects[page_id]["Label"] = f"{prefix}{number}"
    return graph


@pytest.fixture()
def graph_factory() -> Callable[..., ObjectGraph]:
    return build_graph


@pytest.fixture()
def pdf_factory(tmp_path: Path) -> Callable[..., Path]:
    def _create(
        filename: str,
        pages: int = 1,
        title: str | None = None,
        width: float = 72,
        height: float = 72,
    ) -> Path:
        path = tmp_path / filename
        writer = PdfWriter()
        for _ in range(pages):
            writer.add_blank_page(width=width, height=height)
        if title is not None:
            writer.add_metadata({"/Title": title})
        with path.open("wb") as handle:
            writer.write(handle)
        return path

    return _create


@pytest.fixture()
def sample_pdf(pdf_factory: Callable[..., Path]) -> Path:
    return pdf_factory("sample.pdf", pages=5, width=200, height=200, title="Sample")


@pytest.fixture()
def sample_pdfs(pdf_factory: Callable[..., Path]) -> list[Path]:
    return [
        pdf_factory("one.pdf", title="Document One"),
        pdf_factory("two.pdf", pages=2),
    ]


@pytest.fixture()
def empty_pdf(tmp_path: Path) -> Path:
    pdf_path = tmp_path / "empty.pdf"
    writer = PdfWriter()
    with pdf_path.open("wb") as stream:
        writer.write(stream)
    return pdf_path


@pytest.fixture()
def encrypted_pdf(tmp_path: Path) -> Path:
    pdf_path = tmp_path / "locked.pdf"
    writer = PdfWriter()
    writer.add_blank_page(width=72, height=72)
    writer.encrypt(user_password="secret", owner_password="owner", algorithm="RC4-128")
    with pdf_path.open("wb") as stream:
        writer.write(stream)
    return pdf_path


@pytest.fixture()
def corrupted_pdf(tmp_path: Path) -> Path:
    pdf_path = tmp_path / "broken.pdf"
    pdf_path.write_bytes(b"this is not a pdf at all")
    return pdf_path
