# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 VocabScan contributors

"""CSV export of a finished entry collection."""
from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Iterable, List, Optional

from ..extraction.models import Entry

CSV_HEADER = ["word", "correctedWord", "meaning", "confidence"]
CSV_FILENAME = "wordbook.csv"


def _confidence_cell(confidence: Optional[float]) -> str:
    return "" if confidence is None else f"{confidence:.2f}"


def entry_rows(entries: Iterable[Entry]) -> List[List[str]]:
    return [
        [e.word, e.corrected_word or e.word, e.meaning_ko or "", _confidence_cell(e.confidence)]
        for e in entries
    ]


def entries_to_csv(entries: Iterable[Entry]) -> str:
    """Serialize ``entries`` with every cell quoted, header row first."""
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    writer.writerows(entry_rows(entries))
    return buf.getvalue()


def write_csv(entries: Iterable[Entry], path: str | Path) -> Path:
    out = Path(path)
    # BOM so spreadsheet apps pick up the Korean meanings as UTF-8.
    out.write_text(entries_to_csv(entries), encoding="utf-8-sig")
    return out


__all__ = ["CSV_FILENAME", "CSV_HEADER", "entries_to_csv", "entry_rows", "write_csv"]
