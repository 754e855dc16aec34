# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 VocabScan contributors

"""Fill missing meanings from a dictionary lookup plus translation.

Each entry is handled on its own: a failed lookup leaves that entry's meaning
empty, and a failed translation keeps the English definition tagged with
:data:`TRANSLATION_FALLBACK_MARKER` so it stands out for manual editing.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..config import DEFAULT_CALL_TIMEOUT_SEC
from ..errors import AdapterError
from .interfaces import DefinitionLookup, Translator
from .models import DefinitionResult, Entry, MeaningLang, is_blank

logger = logging.getLogger(__name__)

# "translation needed": the meaning is the raw English definition, edit manually.
TRANSLATION_FALLBACK_MARKER = " (번역 필요)"


@dataclass
class BackfillResult:
    entry: Entry
    warning: Optional[str] = None


@dataclass
class MeaningBackfill:
    lookup: DefinitionLookup
    translator: Optional[Translator] = None
    meaning_lang: MeaningLang = MeaningLang.KO
    timeout_sec: float = DEFAULT_CALL_TIMEOUT_SEC
    concurrency: int = 4

    @staticmethod
    def needs_meaning(entry: Entry) -> bool:
        return is_blank(entry.meaning_ko)

    async def _definition(self, word: str) -> Tuple[Optional[DefinitionResult], Optional[str]]:
        try:
            result = await asyncio.wait_for(self.lookup.lookup(word), timeout=self.timeout_sec)
        except asyncio.TimeoutError:
            logger.warning("definition lookup timed out for %r", word)
            return None, f"Dictionary lookup timed out for '{word}'."
        except AdapterError as exc:
            logger.warning("definition lookup failed for %r: %s", word, exc)
            return None, f"Dictionary lookup failed for '{word}'."
        if result is None or is_blank(result.meaning):
            return None, f"No dictionary definition found for '{word}'."
        return result, None

    async def _translate(self, text: str) -> Optional[str]:
        if self.translator is None:
            return None
        try:
            translated = await asyncio.wait_for(
                self.translator.translate(text, self.meaning_lang.value), timeout=self.timeout_sec
            )
        except asyncio.TimeoutError:
            logger.warning("translation timed out")
            return None
        except AdapterError as exc:
            logger.warning("translation failed: %s", exc)
            return None
        return None if is_blank(translated) else translated.strip()

    async def fill(self, entry: Entry) -> BackfillResult:
        if not self.needs_meaning(entry):
            return BackfillResult(entry=entry)

        word = entry.corrected_word or entry.word
        definition, warning = await self._definition(word)
        if definition is None:
            return BackfillResult(entry=entry, warning=warning)

        meaning = definition.meaning.strip()
        if self.meaning_lang is not MeaningLang.EN:
            translated = await self._translate(meaning)
            if translated is None:
                warning = f"Translation failed for '{word}'; English definition kept."
                meaning = meaning + TRANSLATION_FALLBACK_MARKER
            else:
                meaning = translated

        filled = entry.model_copy(
            update={
                "meaning_ko": meaning,
                "part_of_speech": entry.part_of_speech or definition.part_of_speech or None,
                "example": entry.example or definition.example or None,
            }
        )
        return BackfillResult(entry=filled, warning=warning)

    async def backfill(self, entry: Entry) -> Entry:
        """Return ``entry`` with its meaning filled, or unchanged on failure."""
        return (await self.fill(entry)).entry

    async def backfill_all(self, entries: Sequence[Entry]) -> Tuple[List[Entry], List[str]]:
        """Backfill every entry lacking a meaning.

        Lookups run concurrently; results are applied afterwards in entry
        order so no two tasks ever write to the collection.
        """
        semaphore = asyncio.Semaphore(max(1, self.concurrency))

        async def _bounded(entry: Entry) -> BackfillResult:
            async with semaphore:
                return await self.fill(entry)

        pending = [(idx, entry) for idx, entry in enumerate(entries) if self.needs_meaning(entry)]
        results = await asyncio.gather(*(_bounded(entry) for _, entry in pending))

        updated = list(entries)
        warnings: List[str] = []
        for (idx, _), result in zip(pending, results):
            updated[idx] = result.entry
            if result.warning:
                warnings.append(result.warning)
        logger.info("backfilled %d of %d entries", sum(1 for r in results if r.entry.has_meaning), len(pending))
        return updated, warnings


__all__ = ["BackfillResult", "MeaningBackfill", "TRANSLATION_FALLBACK_MARKER"]
