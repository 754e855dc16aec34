# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 VocabScan contributors

"""Printable wordbook PDFs rendered with reportlab.

Three A4 layouts are available:

* ``list``: one table row per entry with its meaning and example
* ``flash``: two columns of rounded flashcards, word on top, meaning below
* ``worksheet``: words with a blank line to write the meaning in

Korean text is set in reportlab's built-in ``HYSMyeongJo-Medium`` CID font so
no font files need to ship with the package.
"""
from __future__ import annotations

import io
from enum import Enum
from pathlib import Path
from typing import List, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.cidfonts import UnicodeCIDFont
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..extraction.models import Entry

CJK_FONT = "HYSMyeongJo-Medium"
HEADER_FILL = colors.Color(91 / 255.0, 141 / 255.0, 239 / 255.0)
MARGIN = 40
GUTTER = 20
CARD_HEIGHT = 120
CARD_RADIUS = 8
CARD_MEANING_CHARS = 120
WORKSHEET_BLANK = "______________"


class PdfLayout(str, Enum):
    LIST = "list"
    FLASH = "flash"
    WORKSHEET = "worksheet"


def pdf_filename(layout: PdfLayout | str) -> str:
    return {
        PdfLayout.LIST: "wordbook_list.pdf",
        PdfLayout.FLASH: "wordbook_flashcards.pdf",
        PdfLayout.WORKSHEET: "wordbook_worksheet.pdf",
    }[PdfLayout(layout)]


def _ensure_font() -> str:
    if CJK_FONT not in pdfmetrics.getRegisteredFontNames():
        pdfmetrics.registerFont(UnicodeCIDFont(CJK_FONT))
    return CJK_FONT


def _cell(text: str, style: ParagraphStyle) -> Paragraph:
    return Paragraph(escape(text or ""), style)


def _table(head: List[str], body: List[List[object]], col_widths: List[float], font_size: int, padding: int) -> Table:
    table = Table([head, *body], colWidths=col_widths, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), HEADER_FILL),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTNAME", (0, 0), (-1, -1), _ensure_font()),
                ("FONTSIZE", (0, 0), (-1, -1), font_size),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.lightgrey),
                ("TOPPADDING", (0, 0), (-1, -1), padding),
                ("BOTTOMPADDING", (0, 0), (-1, -1), padding),
                ("LEFTPADDING", (0, 0), (-1, -1), padding),
                ("RIGHTPADDING", (0, 0), (-1, -1), padding),
            ]
        )
    )
    return table


def _title_style(font: str) -> ParagraphStyle:
    return ParagraphStyle("title", fontName=font, fontSize=14, leading=18)


def _render_list(entries: Sequence[Entry], buf: io.BytesIO) -> None:
    font = _ensure_font()
    body_style = ParagraphStyle("body", fontName=font, fontSize=10, leading=13)
    doc = SimpleDocTemplate(buf, pagesize=A4, leftMargin=MARGIN, rightMargin=MARGIN, topMargin=MARGIN, bottomMargin=MARGIN)
    width = A4[0] - 2 * MARGIN
    body = [
        [
            str(idx),
            _cell(e.best_word, body_style),
            _cell(e.meaning_ko or "", body_style),
            _cell(e.part_of_speech or "", body_style),
            _cell(e.example or "", body_style),
        ]
        for idx, e in enumerate(entries, start=1)
    ]
    widths = [0.06 * width, 0.2 * width, 0.3 * width, 0.12 * width, 0.32 * width]
    doc.build(
        [
            Paragraph("Word List", _title_style(font)),
            Spacer(1, 12),
            _table(["#", "Word", "Meaning", "POS", "Example"], body, widths, font_size=10, padding=6),
        ]
    )


def _render_worksheet(entries: Sequence[Entry], buf: io.BytesIO) -> None:
    font = _ensure_font()
    body_style = ParagraphStyle("body", fontName=font, fontSize=12, leading=15)
    doc = SimpleDocTemplate(buf, pagesize=A4, leftMargin=MARGIN, rightMargin=MARGIN, topMargin=MARGIN, bottomMargin=MARGIN)
    width = A4[0] - 2 * MARGIN
    body = [[str(idx), _cell(e.best_word, body_style), WORKSHEET_BLANK] for idx, e in enumerate(entries, start=1)]
    doc.build(
        [
            Paragraph("Worksheet: Fill in the meanings", _title_style(font)),
            Spacer(1, 12),
            _table(["#", "Word", "Meaning(blank)"], body, [0.08 * width, 0.42 * width, 0.5 * width], font_size=12, padding=8),
        ]
    )


def _render_flashcards(entries: Sequence[Entry], buf: io.BytesIO) -> None:
    font = _ensure_font()
    page_w, page_h = A4
    card_w = (page_w - 2 * MARGIN - GUTTER) / 2
    c = canvas.Canvas(buf, pagesize=A4)
    x, y = MARGIN, MARGIN
    for idx, entry in enumerate(entries):
        # (x, y) track the card's top-left corner measured from the page top.
        bottom = page_h - y - CARD_HEIGHT
        c.roundRect(x, bottom, card_w, CARD_HEIGHT, CARD_RADIUS)
        c.setFont(font, 16)
        c.drawString(x + 16, page_h - y - 30, entry.best_word)
        c.setFont(font, 12)
        meaning = (entry.meaning_ko or "")[:CARD_MEANING_CHARS]
        line_y = page_h - y - 56
        for line in simpleSplit(meaning, font, 12, card_w - 32):
            if line_y < bottom + 8:
                break
            c.drawString(x + 16, line_y, line)
            line_y -= 14

        x += card_w + GUTTER
        if x + card_w > page_w - MARGIN:
            x = MARGIN
            y += CARD_HEIGHT + GUTTER
        if y + CARD_HEIGHT > page_h - MARGIN and idx < len(entries) - 1:
            c.showPage()
            x, y = MARGIN, MARGIN
    c.save()


_RENDERERS = {
    PdfLayout.LIST: _render_list,
    PdfLayout.FLASH: _render_flashcards,
    PdfLayout.WORKSHEET: _render_worksheet,
}


def render_pdf(entries: Sequence[Entry], layout: PdfLayout | str = PdfLayout.LIST) -> bytes:
    """Render ``entries`` in ``layout`` and return the PDF bytes."""
    if not entries:
        raise ValueError("No entries to render")
    buf = io.BytesIO()
    _RENDERERS[PdfLayout(layout)](entries, buf)
    return buf.getvalue()


def write_pdf(entries: Sequence[Entry], path: str | Path, layout: PdfLayout | str = PdfLayout.LIST) -> Path:
    out = Path(path)
    out.write_bytes(render_pdf(entries, layout))
    return out


__all__ = ["PdfLayout", "pdf_filename", "render_pdf", "write_pdf"]
