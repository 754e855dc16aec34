# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 VocabScan contributors

"""Command-line entry for running the extraction pipeline locally.

The CLI wires together either the real adapters (pytesseract, the OpenAI
vision endpoint, dictionaryapi.dev and MyMemory) or mocks, runs one analyze
operation over the given images, prints the resulting entries as JSON and
optionally writes CSV/PDF exports.
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .config import Settings, load_settings
from .errors import ExtractionError
from .export import PdfLayout, write_csv, write_pdf
from .extraction import (
    CaseMode,
    DictionaryApiLookup,
    Engine,
    ExtractionOptions,
    ImageInput,
    MeaningLang,
    MockDefinitionLookup,
    MockTextRecognizer,
    MockTranslator,
    MockVisionAnalyzer,
    MyMemoryTranslator,
    OpenAIVisionAnalyzer,
    TesseractTextRecognizer,
    WordbookSession,
)
from .utils.json_utils import json_ready


def build_session(settings: Optional[Settings] = None, *, use_mocks: bool = False) -> WordbookSession:
    settings = settings or load_settings()
    if use_mocks:
        return WordbookSession.from_settings(
            settings,
            text_recognizer=MockTextRecognizer(),
            vision_analyzer=MockVisionAnalyzer(),
            definition_lookup=MockDefinitionLookup({"banana": "a long curved fruit"}),
            translator=MockTranslator({"a long curved fruit": "바나나"}),
        )

    text_recognizer = TesseractTextRecognizer(lang=settings.tesseract_lang) if settings.allow_pytesseract else None
    return WordbookSession.from_settings(
        settings,
        text_recognizer=text_recognizer,
        vision_analyzer=OpenAIVisionAnalyzer.from_settings(settings),
        definition_lookup=DictionaryApiLookup.from_settings(settings),
        translator=MyMemoryTranslator.from_settings(settings),
    )


def _load_images(paths: Sequence[str]) -> List[ImageInput]:
    return [ImageInput.from_path(p, index=idx) for idx, p in enumerate(paths)]


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Extract vocabulary entries from word-list images")
    parser.add_argument("--images", nargs="+", required=True, help="Image files, processed in the given order")
    parser.add_argument("--engine", choices=[e.value for e in Engine], default=Engine.OCR.value)
    parser.add_argument("--min-length", type=int, default=2, help="Drop words shorter than this")
    parser.add_argument("--case", choices=[c.value for c in CaseMode], default=CaseMode.LOWER.value)
    parser.add_argument("--no-recheck", action="store_true", help="Skip the low-confidence recheck pass")
    parser.add_argument("--fill-meanings", action="store_true", help="Look up meanings for entries without one")
    parser.add_argument("--meaning-lang", choices=[m.value for m in MeaningLang], default=MeaningLang.KO.value)
    parser.add_argument("--csv", help="Write entries to this CSV file")
    parser.add_argument("--pdf", help="Write entries to this PDF file")
    parser.add_argument("--layout", choices=[p.value for p in PdfLayout], default=PdfLayout.LIST.value)
    parser.add_argument("--out", default="-", help="JSON output file path or '-' for stdout")
    parser.add_argument(
        "--use-mocks",
        action="store_true",
        help="Use mock adapters (no OCR engine or network) for fast smoke tests",
    )
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(list(argv) if argv is not None else None)


def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    session = build_session(use_mocks=args.use_mocks)
    options = ExtractionOptions(
        min_length=args.min_length,
        case_mode=CaseMode(args.case),
        recheck=not args.no_recheck,
        fill_meanings=args.fill_meanings,
        meaning_lang=MeaningLang(args.meaning_lang),
    )

    try:
        result = asyncio.run(session.analyze(_load_images(args.images), engine=args.engine, options=options))
    except ExtractionError as exc:
        raise SystemExit(f"error: {exc}") from exc

    for warning in result.warnings:
        print(f"warning: {warning}", file=sys.stderr)

    if args.csv:
        write_csv(result.entries, args.csv)
    if args.pdf and result.entries:
        write_pdf(result.entries, args.pdf, layout=args.layout)

    payload = json.dumps(json_ready(result), ensure_ascii=False, indent=2)
    if args.out == "-":
        print(payload)
    else:
        Path(args.out).write_text(payload, encoding="utf-8")


if __name__ == "__main__":  # pragma: no cover
    main()
