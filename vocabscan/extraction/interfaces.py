# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 VocabScan contributors

"""Interfaces for the recognition and lookup adapters used by the pipeline."""
from __future__ import annotations

from typing import List, Optional, Protocol, Sequence

from .models import DefinitionResult, ImageInput, RecheckItem, RecognizedItem


class TextRecognizer(Protocol):
    """Local engine producing raw multi-line text for one image."""

    async def recognize(self, image: ImageInput) -> str:
        ...


class VisionAnalyzer(Protocol):
    """Remote engine producing structured vocabulary items with confidences."""

    async def analyze(self, images: Sequence[ImageInput]) -> List[RecognizedItem]:
        ...

    async def recheck(self, words: Sequence[str], images: Sequence[ImageInput]) -> List[RecheckItem]:
        ...


class DefinitionLookup(Protocol):
    async def lookup(self, word: str) -> Optional[DefinitionResult]:
        ...


class Translator(Protocol):
    async def translate(self, text: str, target_lang: str) -> str:
        ...
