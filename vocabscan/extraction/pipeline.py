# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 VocabScan contributors

"""Composable extraction pipeline and the session that owns its entries.

:class:`WordbookSession` is the only writer of the entry collection. Each
user operation (analyze, recheck, fill meanings, edits) runs its stages to
completion on a private copy and commits the result in one assignment, so a
failed operation leaves the previous collection untouched.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Tuple, TypeVar

from ..config import DEFAULT_CALL_TIMEOUT_SEC, DEFAULT_LOW_CONFIDENCE, Settings
from ..errors import AdapterError, ExtractionError
from .backfill import MeaningBackfill
from .interfaces import DefinitionLookup, TextRecognizer, Translator, VisionAnalyzer
from .line_parser import DEFAULT_MIN_LENGTH, is_valid_word, normalize_word, parse_lines
from .models import (
    CaseMode,
    Engine,
    Entry,
    EntrySource,
    ImageInput,
    MeaningLang,
    PipelineResult,
    PipelineState,
    RecognizedItem,
    is_blank,
)
from .recheck import RecheckOrchestrator
from .reconcile import merge

logger = logging.getLogger(__name__)

_T = TypeVar("_T")

ProgressCallback = Callable[[int, int], None]

_EDITABLE_FIELDS = {"word", "corrected_word", "meaning_ko", "part_of_speech", "example", "confidence"}


@dataclass
class ExtractionOptions:
    min_length: int = DEFAULT_MIN_LENGTH
    case_mode: CaseMode = CaseMode.LOWER
    recheck: bool = True
    fill_meanings: bool = False
    meaning_lang: MeaningLang = MeaningLang.KO


def items_to_entries(
    items: Sequence[RecognizedItem],
    min_length: int = DEFAULT_MIN_LENGTH,
    case_mode: CaseMode | str = CaseMode.LOWER,
) -> List[Entry]:
    """Map analyzer items to entries, dropping words that fail validation."""
    entries: List[Entry] = []
    for item in items:
        word = normalize_word(item.word.strip(), case_mode)
        if not is_valid_word(word, min_length):
            continue
        corrected = normalize_word((item.corrected_word or "").strip(), case_mode)
        if not is_valid_word(corrected, 1):
            corrected = word
        meaning = None if is_blank(item.meaning_ko) else item.meaning_ko.strip()
        entries.append(
            Entry(
                word=word,
                corrected_word=corrected,
                meaning_ko=meaning,
                confidence=item.confidence,
                source=EntrySource.IMAGE_AI,
            )
        )
    return entries


@dataclass
class WordbookSession:
    """Owns the transient entry collection for one user and drives the stages."""

    text_recognizer: Optional[TextRecognizer] = None
    vision_analyzer: Optional[VisionAnalyzer] = None
    definition_lookup: Optional[DefinitionLookup] = None
    translator: Optional[Translator] = None
    low_confidence_threshold: float = DEFAULT_LOW_CONFIDENCE
    call_timeout_sec: float = DEFAULT_CALL_TIMEOUT_SEC
    backfill_concurrency: int = 4
    progress: Optional[ProgressCallback] = None

    entries: List[Entry] = field(default_factory=list)
    images: List[ImageInput] = field(default_factory=list)
    state: Optional[PipelineState] = None
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def from_settings(cls, settings: Settings, **adapters: Any) -> "WordbookSession":
        return cls(
            low_confidence_threshold=settings.low_confidence_threshold,
            call_timeout_sec=settings.call_timeout_sec,
            backfill_concurrency=settings.backfill_concurrency,
            **adapters,
        )

    # ------------------------------------------------------------------
    # stages
    # ------------------------------------------------------------------
    async def _per_image(
        self, images: Sequence[ImageInput], call: Callable[[ImageInput], Awaitable[_T]]
    ) -> Tuple[List[Tuple[ImageInput, Optional[_T]]], List[str]]:
        """Run ``call`` on every image concurrently; results come back in file-index order."""
        done = 0
        total = len(images)

        async def _one(image: ImageInput) -> Tuple[Optional[_T], Optional[str]]:
            nonlocal done
            try:
                result = await asyncio.wait_for(call(image), timeout=self.call_timeout_sec)
                return result, None
            except asyncio.TimeoutError:
                logger.warning("recognition timed out for %s", image.filename)
                return None, f"Recognition timed out for {image.filename}; image skipped."
            except AdapterError as exc:
                logger.warning("recognition failed for %s: %s", image.filename, exc)
                return None, f"Recognition failed for {image.filename} ({exc}); image skipped."
            finally:
                done += 1
                if self.progress is not None:
                    self.progress(done, total)

        outcomes = await asyncio.gather(*(_one(image) for image in images))
        results = [(image, result) for image, (result, _) in zip(images, outcomes)]
        warnings = [warning for _, warning in outcomes if warning]
        return results, warnings

    async def _initial_pass(
        self, images: Sequence[ImageInput], engine: Engine, options: ExtractionOptions
    ) -> Tuple[List[Entry], List[str]]:
        candidates: List[Entry] = []
        if engine is Engine.OCR:
            if self.text_recognizer is None:
                raise ExtractionError("No text recognizer configured")
            results, warnings = await self._per_image(images, self.text_recognizer.recognize)
            for _, text in results:
                if text is not None:
                    candidates.extend(parse_lines(text, options.min_length, options.case_mode))
        else:
            if self.vision_analyzer is None:
                raise ExtractionError("No vision analyzer configured")
            analyzer = self.vision_analyzer
            results, warnings = await self._per_image(images, lambda image: analyzer.analyze([image]))
            for _, items in results:
                if items is not None:
                    candidates.extend(items_to_entries(items, options.min_length, options.case_mode))

        if all(result is None for _, result in results):
            raise ExtractionError("Recognition failed for every image: " + " ".join(warnings))
        return merge(candidates), warnings

    async def _recheck(
        self, entries: List[Entry], images: Sequence[ImageInput]
    ) -> Tuple[List[Entry], List[str]]:
        if self.vision_analyzer is None:
            return entries, []
        orchestrator = RecheckOrchestrator(
            analyzer=self.vision_analyzer,
            threshold=self.low_confidence_threshold,
            timeout_sec=self.call_timeout_sec,
        )
        outcome = await orchestrator.run(entries, images)
        return outcome.entries, [outcome.warning] if outcome.warning else []

    async def _backfill(self, entries: List[Entry], meaning_lang: MeaningLang) -> Tuple[List[Entry], List[str]]:
        if self.definition_lookup is None:
            return entries, ["Meaning lookup is not configured; meanings left empty."]
        service = MeaningBackfill(
            lookup=self.definition_lookup,
            translator=self.translator,
            meaning_lang=meaning_lang,
            timeout_sec=self.call_timeout_sec,
            concurrency=self.backfill_concurrency,
        )
        return await service.backfill_all(entries)

    # ------------------------------------------------------------------
    # operations
    # ------------------------------------------------------------------
    async def analyze(
        self,
        images: Sequence[ImageInput],
        engine: Engine | str = Engine.OCR,
        options: Optional[ExtractionOptions] = None,
    ) -> PipelineResult:
        """Recognize ``images`` and replace the collection with the result.

        Raises :class:`ExtractionError` when no images are given or every
        recognition call fails; the current collection is kept in that case.
        """
        options = options or ExtractionOptions()
        engine = Engine(engine)
        if not images:
            raise ExtractionError("No images supplied")
        ordered = sorted(images, key=lambda image: image.index)

        entries, warnings = await self._initial_pass(ordered, engine, options)
        state = PipelineState.INITIAL_PASS_COMPLETE
        logger.info("initial pass produced %d entries from %d images", len(entries), len(ordered))
        if not entries:
            warnings.append("No words were recognized in the uploaded images.")

        if options.recheck and engine is Engine.AI:
            entries, extra = await self._recheck(entries, ordered)
            warnings.extend(extra)
            state = PipelineState.RECHECK_COMPLETE

        if options.fill_meanings:
            entries, extra = await self._backfill(entries, options.meaning_lang)
            warnings.extend(extra)

        self.entries = entries
        self.images = list(ordered)
        self.state = state
        self.warnings = warnings
        return self.result()

    async def recheck(self) -> PipelineResult:
        """Re-run the recheck pass on the current collection and images."""
        if not self.images:
            raise ExtractionError("No images to recheck against")
        entries, warnings = await self._recheck(list(self.entries), self.images)
        self.entries = entries
        self.state = PipelineState.RECHECK_COMPLETE
        self.warnings = warnings
        return self.result()

    async def fill_meanings(self, meaning_lang: MeaningLang | str = MeaningLang.KO) -> PipelineResult:
        entries, warnings = await self._backfill(list(self.entries), MeaningLang(meaning_lang))
        self.entries = entries
        self.warnings = warnings
        return self.result()

    def dedupe(self) -> List[Entry]:
        self.entries = merge(self.entries)
        return self.entries

    def edit(self, index: int, **changes: Any) -> Entry:
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown entry fields: {sorted(unknown)}")
        if "word" in changes and not is_valid_word(changes["word"], 1):
            raise ValueError(f"Not a valid word: {changes['word']!r}")
        current = self.entries[index]
        if "word" in changes and "corrected_word" not in changes and current.corrected_word == current.word:
            changes["corrected_word"] = changes["word"]
        updated = Entry.model_validate({**current.model_dump(), **changes})
        self.entries[index] = updated
        return updated

    def delete(self, index: int) -> Entry:
        return self.entries.pop(index)

    def clear(self) -> None:
        self.entries = []
        self.images = []
        self.state = None
        self.warnings = []

    def low_confidence_words(self) -> List[str]:
        return [e.best_word for e in self.entries if e.is_low_confidence(self.low_confidence_threshold)]

    def result(self) -> PipelineResult:
        return PipelineResult(
            entries=[entry.model_copy() for entry in self.entries],
            warnings=list(self.warnings),
            state=self.state,
            low_confidence=self.low_confidence_words(),
        )


__all__ = ["ExtractionOptions", "ProgressCallback", "WordbookSession", "items_to_entries"]
