# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 VocabScan contributors

"""Turn raw OCR text into candidate vocabulary entries.

Word lists come in two shapes: ``word - meaning`` pairs and bare runs of
words. Each line is first tried as a pair against a fixed set of separators;
lines that do not split are broken into single-word candidates. Candidates
that do not look like an English word are dropped without complaint, since
most of them are OCR noise (page numbers, bullets, stray glyphs).
"""
from __future__ import annotations

import re
from typing import List, Optional

from .models import CaseMode, Entry, EntrySource

DEFAULT_MIN_LENGTH = 2

# hyphen, em-dash, colon and equals need whitespace on at least one side so
# that "well-known" or "10:30" stay intact; arrow and tab split anywhere.
_PAIR_SPLIT_RX = re.compile(r"\s*->\s*|\s*\t\s*|\s[-—:=]\s|[-—:=]\s|\s[-—:=]")
_TOKEN_SPLIT_RX = re.compile(r"[^A-Za-z']")
_WORD_RX = re.compile(r"^[A-Za-z][A-Za-z']*$")
_LINE_SPLIT_RX = re.compile(r"\r?\n")


def normalize_word(word: Optional[str], case_mode: CaseMode | str = CaseMode.LOWER) -> Optional[str]:
    if not word:
        return word
    mode = CaseMode(case_mode)
    if mode is CaseMode.LOWER:
        return word.lower()
    if mode is CaseMode.UPPER:
        return word.upper()
    return word


def is_valid_word(word: Optional[str], min_length: int = DEFAULT_MIN_LENGTH) -> bool:
    """Letters and apostrophes only, starting with a letter, at least ``min_length`` long."""
    if not word:
        return False
    if not _WORD_RX.match(word):
        return False
    return len(word) >= min_length


def split_pair(line: str) -> Optional[tuple[str, str]]:
    """Return ``(word, meaning)`` when ``line`` splits on a known separator."""
    fields = _PAIR_SPLIT_RX.split(line)
    if len(fields) < 2:
        return None
    word = fields[0].strip()
    meaning = " - ".join(f.strip() for f in fields[1:]).strip()
    return word, meaning


def parse_lines(
    raw_text: str,
    min_length: int = DEFAULT_MIN_LENGTH,
    case_mode: CaseMode | str = CaseMode.LOWER,
) -> List[Entry]:
    lines = [ln.strip() for ln in _LINE_SPLIT_RX.split(raw_text or "")]
    results: List[Entry] = []
    for line in lines:
        if not line:
            continue
        pair = split_pair(line)
        if pair is not None:
            word = normalize_word(pair[0], case_mode)
            if is_valid_word(word, min_length):
                results.append(
                    Entry(word=word, meaning_ko=pair[1] or None, source=EntrySource.IMAGE_OCR)
                )
            continue
        for token in _TOKEN_SPLIT_RX.split(line):
            word = normalize_word(token.strip(), case_mode)
            if is_valid_word(word, min_length):
                results.append(Entry(word=word, source=EntrySource.IMAGE_OCR))
    return results


__all__ = ["DEFAULT_MIN_LENGTH", "is_valid_word", "normalize_word", "parse_lines", "split_pair"]
