"""Tests for bulk note import and single-note creation."""

from unittest.mock import AsyncMock

import pytest
from pypdf import PageObject, PdfWriter
from pypdf.generic import DecodedStreamObject, DictionaryObject, NameObject

from notes_rag.errors import StoreWriteFailure, ValidationFailure
from notes_rag.ingest import chunk_text, create_note, import_notes, iter_files, load_pdf


def test_chunk_text_short_text_is_one_chunk():
    assert chunk_text("  A short note.  ") == ["A short note."]


def test_chunk_text_overlapping_windows():
    text = "abcdefghij"

    assert chunk_text(text, chunk_size=4, chunk_overlap=1) == ["abcd", "defg", "ghij"]


def test_chunk_text_blank():
    assert chunk_text(" \r\n \n") == []


def test_chunk_text_rejects_overlap_not_smaller_than_size():
    with pytest.raises(ValueError):
        chunk_text("abc", chunk_size=2, chunk_overlap=2)


def test_iter_files_filters_suffixes(tmp_path):
    (tmp_path / "a.md").write_text("a")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "b.TXT").write_text("b")
    (tmp_path / "c.png").write_bytes(b"\x89PNG")

    names = [p.name for p in iter_files(tmp_path)]

    assert names == ["a.md", "b.TXT"]


@pytest.mark.asyncio
class TestImportNotes:
    async def test_each_chunk_becomes_a_note(self, orchestrator, tmp_path):
        (tmp_path / "france.md").write_text("Paris is the capital of France.")
        (tmp_path / "long.txt").write_text("x" * 10)

        notes = await import_notes(orchestrator, tmp_path, chunk_size=4, chunk_overlap=0)

        texts = [n.text for n in notes]
        assert texts[:3] == ["Pari", "s is", "the"]
        assert texts[-3:] == ["xxxx", "xxxx", "xx"]
        assert len(texts) == 11
        assert len(orchestrator.store) == 11

    async def test_unreadable_file_is_skipped(self, orchestrator, tmp_path):
        (tmp_path / "bad.md").write_bytes(b"\xff\xfe\xfa not utf-8")
        (tmp_path / "good.md").write_text("A good note.")

        notes = await import_notes(orchestrator, tmp_path)

        assert [n.text for n in notes] == ["A good note."]

    async def test_missing_directory(self, orchestrator, tmp_path):
        assert await import_notes(orchestrator, tmp_path / "missing") == []

    async def test_store_failure_aborts(self, orchestrator, tmp_path):
        (tmp_path / "a.md").write_text("one")
        orchestrator.store.insert = AsyncMock(side_effect=StoreWriteFailure("disk full"))

        with pytest.raises(StoreWriteFailure):
            await import_notes(orchestrator, tmp_path)


def test_create_note_returns_text_and_note(orchestrator):
    created = create_note("Buy milk", orchestrator=orchestrator)

    assert created["text"] == "Buy milk"
    assert created["note"].text == "Buy milk"
    assert created["note"].id


def test_create_note_missing_text(orchestrator):
    with pytest.raises(ValidationFailure):
        create_note("", orchestrator=orchestrator)


def _write_pdf(path, text):
    writer = PdfWriter()
    page = writer.add_blank_page(width=400, height=144)
    font = DictionaryObject(
        {
            NameObject("/Type"): NameObject("/Font"),
            NameObject("/Subtype"): NameObject("/Type1"),
            NameObject("/BaseFont"): NameObject("/Helvetica"),
        }
    )
    page[NameObject("/Resources")] = DictionaryObject(
        {NameObject("/Font"): DictionaryObject({NameObject("/F1"): font})}
    )
    content = DecodedStreamObject()
    content.set_data(f"BT /F1 12 Tf 20 100 Td ({text}) Tj ET".encode("latin-1"))
    page.replace_contents(content)
    with path.open("wb") as f:
        writer.write(f)


def test_load_pdf_reads_page_text(tmp_path):
    path = tmp_path / "france.pdf"
    _write_pdf(path, "Paris is the capital of France.")

    assert "Paris is the capital of France." in load_pdf(path)


def test_load_pdf_skips_pages_that_fail(tmp_path, monkeypatch):
    path = tmp_path / "france.pdf"
    _write_pdf(path, "Paris is the capital of France.")

    def broken_extract_text(self, *args, **kwargs):
        raise KeyError("/Font")

    monkeypatch.setattr(PageObject, "extract_text", broken_extract_text)

    assert load_pdf(path) == ""


@pytest.mark.asyncio
class TestImportPdf:
    async def test_pdf_text_becomes_a_note(self, orchestrator, tmp_path):
        _write_pdf(tmp_path / "france.pdf", "Paris is the capital of France.")

        notes = await import_notes(orchestrator, tmp_path)

        assert len(notes) == 1
        assert "Paris is the capital of France." in notes[0].text

    async def test_broken_pdf_is_skipped(self, orchestrator, tmp_path):
        (tmp_path / "broken.pdf").write_bytes(b"this is not a pdf")
        (tmp_path / "good.md").write_text("A good note.")

        notes = await import_notes(orchestrator, tmp_path)

        assert [n.text for n in notes] == ["A good note."]
