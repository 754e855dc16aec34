# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 VocabScan contributors

"""VocabScan: turn photographed word lists into an editable wordbook."""

from ._version import __version__
from .config import Settings, load_settings
from .errors import AdapterError, ExtractionError, OptionalDependencyError, VocabScanError
from .export import PdfLayout, entries_to_csv, render_pdf, write_csv, write_pdf
from .extraction import (
    CaseMode,
    Engine,
    Entry,
    EntrySource,
    ExtractionOptions,
    ImageInput,
    MeaningLang,
    PipelineResult,
    PipelineState,
    WordbookSession,
    merge,
    parse_lines,
)

__all__ = [
    "AdapterError",
    "CaseMode",
    "Engine",
    "Entry",
    "EntrySource",
    "ExtractionError",
    "ExtractionOptions",
    "ImageInput",
    "MeaningLang",
    "OptionalDependencyError",
    "PdfLayout",
    "PipelineResult",
    "PipelineState",
    "Settings",
    "VocabScanError",
    "WordbookSession",
    "__version__",
    "entries_to_csv",
    "load_settings",
    "merge",
    "parse_lines",
    "render_pdf",
    "write_csv",
    "write_pdf",
]
