import csv
import io
import re

import pytest

from vocabscan.export import CSV_HEADER, PdfLayout, entries_to_csv, pdf_filename, render_pdf, write_csv, write_pdf
from vocabscan.extraction import Entry, EntrySource

ENTRIES = [
    Entry(word="apple", meaning_ko="사과", confidence=0.97, source=EntrySource.IMAGE_AI),
    Entry(word="teh", corrected_word="the", confidence=0.953, source=EntrySource.IMAGE_AI),
    Entry(word="say", meaning_ko='말하다, "이야기하다"', part_of_speech="verb", example="Say it again."),
]


def test_csv_quotes_every_cell():
    text = entries_to_csv(ENTRIES)
    lines = text.splitlines()

    assert lines[0] == '"word","correctedWord","meaning","confidence"'
    assert lines[1] == '"apple","apple","사과","0.97"'
    assert lines[2] == '"teh","the","","0.95"'
    assert lines[3] == '"say","say","말하다, ""이야기하다""",""'


def test_csv_round_trips_through_reader():
    rows = list(csv.reader(io.StringIO(entries_to_csv(ENTRIES))))
    assert rows[0] == CSV_HEADER
    assert rows[3][2] == '말하다, "이야기하다"'


def test_csv_with_no_entries_has_header_only():
    assert entries_to_csv([]) == '"word","correctedWord","meaning","confidence"\n'


def test_write_csv_adds_bom(tmp_path):
    out = write_csv(ENTRIES, tmp_path / "wordbook.csv")
    raw = out.read_bytes()
    assert raw.startswith(b"\xef\xbb\xbf")
    assert "사과" in raw.decode("utf-8-sig")


@pytest.mark.parametrize("layout", list(PdfLayout))
def test_pdf_layouts_render(layout):
    data = render_pdf(ENTRIES, layout)
    assert data.startswith(b"%PDF")


def test_flashcards_paginate():
    many = [Entry(word=f"word{chr(97 + i % 26)}", meaning_ko="뜻 " * 80) for i in range(30)]
    data = render_pdf(many, "flash")
    assert len(re.findall(rb"/Type\s*/Page(?!s)", data)) == 3


def test_pdf_requires_entries():
    with pytest.raises(ValueError):
        render_pdf([], PdfLayout.LIST)


def test_write_pdf(tmp_path):
    out = write_pdf(ENTRIES, tmp_path / pdf_filename("worksheet"), layout="worksheet")
    assert out.name == "wordbook_worksheet.pdf"
    assert out.read_bytes().startswith(b"%PDF")


def test_pdf_filenames():
    assert pdf_filename(PdfLayout.LIST) == "wordbook_list.pdf"
    assert pdf_filename("flash") == "wordbook_flashcards.pdf"


def test_pdf_filenames_cover_every_layout():
    assert {pdf_filename(layout) for layout in PdfLayout} == {
        "wordbook_list.pdf",
        "wordbook_flashcards.pdf",
        "wordbook_worksheet.pdf",
    }
