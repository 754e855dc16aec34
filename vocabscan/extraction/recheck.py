# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 VocabScan contributors

"""Two-pass confidence verification for AI-extracted entries.

After the first vision pass, every AI-sourced entry scored below the
threshold (or not scored at all) is sent back to the analyzer together with
the original images for a targeted re-verification. The analyzer's verdicts
overwrite spelling and confidence on the matching entries. A recheck that
fails leaves the first-pass entries untouched.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from ..config import DEFAULT_CALL_TIMEOUT_SEC, DEFAULT_LOW_CONFIDENCE
from ..errors import AdapterError
from .interfaces import VisionAnalyzer
from .line_parser import is_valid_word, normalize_word
from .models import CaseMode, Entry, EntrySource, ImageInput, PipelineState, RecheckItem
from .reconcile import merge

logger = logging.getLogger(__name__)


def collect_low_confidence_words(
    entries: Iterable[Entry], threshold: float = DEFAULT_LOW_CONFIDENCE
) -> List[str]:
    """Distinct original words of AI entries below ``threshold``.

    Order follows the entries; the first spelling of a word is kept and later
    case variants are coalesced into it.
    """
    seen = set()
    words: List[str] = []
    for entry in entries:
        if entry.source is not EntrySource.IMAGE_AI:
            continue
        if not entry.is_low_confidence(threshold):
            continue
        key = entry.word.lower()
        if key in seen:
            continue
        seen.add(key)
        words.append(entry.word)
    return words


def _corrected_spelling(entry: Entry, corrected: Optional[str]) -> str:
    """Clean a returned spelling; anything that is not a word falls back to ``entry.word``."""
    # Follow the case the entry was normalized with.
    if entry.word.islower():
        mode = CaseMode.LOWER
    elif entry.word.isupper():
        mode = CaseMode.UPPER
    else:
        mode = CaseMode.NONE
    corrected = normalize_word((corrected or "").strip(), mode)
    return corrected if is_valid_word(corrected, 1) else entry.word


def apply_recheck(entries: Sequence[Entry], items: Iterable[RecheckItem]) -> List[Entry]:
    """Overwrite ``corrected_word``/``confidence`` on the first entry matching each item.

    Matching is case-insensitive on the original ``word``. Items without a
    match are dropped; the result always has exactly ``len(entries)`` entries.
    """
    updated = [entry.model_copy() for entry in entries]
    for item in items:
        target = item.word.lower()
        for idx, entry in enumerate(updated):
            if entry.word.lower() != target:
                continue
            changes = {"corrected_word": _corrected_spelling(entry, item.corrected_word)}
            if item.confidence is not None:
                changes["confidence"] = item.confidence
            updated[idx] = entry.model_copy(update=changes)
            break
        else:
            logger.debug("recheck returned unknown word %r; dropped", item.word)
    return updated


@dataclass
class RecheckOutcome:
    entries: List[Entry]
    state: PipelineState = PipelineState.RECHECK_COMPLETE
    requested: List[str] = field(default_factory=list)
    applied: bool = False
    warning: Optional[str] = None


@dataclass
class RecheckOrchestrator:
    """Drive the recheck pass: collect, request once, apply, re-merge."""

    analyzer: VisionAnalyzer
    threshold: float = DEFAULT_LOW_CONFIDENCE
    timeout_sec: float = DEFAULT_CALL_TIMEOUT_SEC

    async def run(self, entries: Sequence[Entry], images: Sequence[ImageInput]) -> RecheckOutcome:
        words = collect_low_confidence_words(entries, self.threshold)
        if not words:
            logger.info("recheck skipped: no low-confidence words")
            return RecheckOutcome(entries=list(entries))

        logger.info("rechecking %d low-confidence words", len(words))
        try:
            items = await asyncio.wait_for(self.analyzer.recheck(words, images), timeout=self.timeout_sec)
        except asyncio.TimeoutError:
            logger.warning("recheck timed out after %.0fs", self.timeout_sec)
            return RecheckOutcome(
                entries=list(entries),
                requested=words,
                warning="Recheck timed out; low-confidence words are left for manual review.",
            )
        except AdapterError as exc:
            logger.warning("recheck failed: %s", exc)
            return RecheckOutcome(
                entries=list(entries),
                requested=words,
                warning=f"Recheck failed ({exc}); low-confidence words are left for manual review.",
            )

        corrected = merge(apply_recheck(entries, items))
        return RecheckOutcome(entries=corrected, requested=words, applied=True)


__all__ = [
    "RecheckOrchestrator",
    "RecheckOutcome",
    "apply_recheck",
    "collect_low_confidence_words",
]
