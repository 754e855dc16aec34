"""Vocabulary extraction pipeline: adapters, parsing, reconciliation, recheck and backfill."""

from .backfill import TRANSLATION_FALLBACK_MARKER, BackfillResult, MeaningBackfill
from .interfaces import DefinitionLookup, TextRecognizer, Translator, VisionAnalyzer
from .line_parser import DEFAULT_MIN_LENGTH, is_valid_word, normalize_word, parse_lines, split_pair
from .lookup import DictionaryApiLookup, MyMemoryTranslator
from .mocks import MockDefinitionLookup, MockTextRecognizer, MockTranslator, MockVisionAnalyzer
from .models import (
    CaseMode,
    DefinitionResult,
    Engine,
    Entry,
    EntrySource,
    ImageInput,
    MeaningLang,
    PipelineResult,
    PipelineState,
    RecheckItem,
    RecognizedItem,
)
from .pipeline import ExtractionOptions, WordbookSession, items_to_entries
from .recheck import RecheckOrchestrator, RecheckOutcome, apply_recheck, collect_low_confidence_words
from .reconcile import dedupe_key, merge, merge_ai_result, merge_pair
from .tesseract import TesseractTextRecognizer
from .vision import OpenAIVisionAnalyzer

__all__ = [
    "BackfillResult",
    "CaseMode",
    "DEFAULT_MIN_LENGTH",
    "DefinitionLookup",
    "DefinitionResult",
    "DictionaryApiLookup",
    "Engine",
    "Entry",
    "EntrySource",
    "ExtractionOptions",
    "ImageInput",
    "MeaningBackfill",
    "MeaningLang",
    "MockDefinitionLookup",
    "MockTextRecognizer",
    "MockTranslator",
    "MockVisionAnalyzer",
    "MyMemoryTranslator",
    "OpenAIVisionAnalyzer",
    "PipelineResult",
    "PipelineState",
    "RecheckItem",
    "RecheckOrchestrator",
    "RecheckOutcome",
    "RecognizedItem",
    "TRANSLATION_FALLBACK_MARKER",
    "TesseractTextRecognizer",
    "TextRecognizer",
    "Translator",
    "VisionAnalyzer",
    "WordbookSession",
    "apply_recheck",
    "collect_low_confidence_words",
    "dedupe_key",
    "is_valid_word",
    "items_to_entries",
    "merge",
    "merge_ai_result",
    "merge_pair",
    "normalize_word",
    "parse_lines",
    "split_pair",
]
