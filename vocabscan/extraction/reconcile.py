# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 VocabScan contributors

"""Deduplicate and merge vocabulary entries.

Entries are keyed by the lowercase corrected spelling (falling back to the
recognized word), so two OCR variants of a misspelled word collapse once one
of them has been corrected. The first entry seen for a key is authoritative
for its spelling; later duplicates can only fill gaps or raise confidence.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from .models import Entry, is_blank


def dedupe_key(entry: Entry) -> str:
    return (entry.corrected_word or entry.word).lower()


def _fill(prior: Optional[str], incoming: Optional[str]) -> Optional[str]:
    return incoming if is_blank(prior) and not is_blank(incoming) else prior


def _max_confidence(a: Optional[float], b: Optional[float]) -> Optional[float]:
    if a is None:
        return b
    if b is None:
        return a
    return max(a, b)


def merge_pair(prior: Entry, incoming: Entry) -> Entry:
    """Fold ``incoming`` into ``prior`` without mutating either."""
    return prior.model_copy(
        update={
            "meaning_ko": _fill(prior.meaning_ko, incoming.meaning_ko),
            "part_of_speech": _fill(prior.part_of_speech, incoming.part_of_speech),
            "example": _fill(prior.example, incoming.example),
            "confidence": _max_confidence(prior.confidence, incoming.confidence),
        }
    )


def merge(entries: Iterable[Entry]) -> List[Entry]:
    """Return one survivor per dedupe key, in first-seen order."""
    merged: Dict[str, Entry] = {}
    for entry in entries:
        key = dedupe_key(entry)
        prior = merged.get(key)
        merged[key] = entry.model_copy() if prior is None else merge_pair(prior, entry)
    return list(merged.values())


def merge_ai_result(existing: Iterable[Entry], incoming: Iterable[Entry]) -> List[Entry]:
    """Merge a fresh batch of entries into an existing collection.

    Existing entries come first, so they keep their spelling and meaning;
    the incoming batch only fills empty fields and can raise confidence.
    """
    return merge([*existing, *incoming])


__all__ = ["dedupe_key", "merge", "merge_ai_result", "merge_pair"]
