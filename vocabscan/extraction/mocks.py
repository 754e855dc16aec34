"""Mock implementations of pipeline adapters for testing and dry runs."""
from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence

from ..errors import AdapterError
from .interfaces import DefinitionLookup, TextRecognizer, Translator, VisionAnalyzer
from .models import DefinitionResult, ImageInput, RecheckItem, RecognizedItem

_SAMPLE_TEXT = "apple - 사과\nbanana\nApple"


class MockTextRecognizer(TextRecognizer):
    """Return canned text per image index; indices in ``failing`` raise."""

    def __init__(self, texts: Optional[Mapping[int, str]] = None, failing: Sequence[int] = ()) -> None:
        self.texts = dict(texts) if texts is not None else None
        self.failing = set(failing)
        self.calls: List[ImageInput] = []

    async def recognize(self, image: ImageInput) -> str:
        self.calls.append(image)
        if image.index in self.failing:
            raise AdapterError(f"mock OCR failure for image {image.index}")
        if self.texts is None:
            return _SAMPLE_TEXT
        return self.texts.get(image.index, "")


class MockVisionAnalyzer(VisionAnalyzer):
    """Canned analyze/recheck answers keyed by image index."""

    def __init__(
        self,
        items: Optional[Mapping[int, Sequence[RecognizedItem]]] = None,
        recheck_items: Sequence[RecheckItem] = (),
        failing: Sequence[int] = (),
        recheck_error: Optional[Exception] = None,
    ) -> None:
        self.items = dict(items) if items is not None else None
        self.recheck_items = list(recheck_items)
        self.failing = set(failing)
        self.recheck_error = recheck_error
        self.analyze_calls: List[List[ImageInput]] = []
        self.recheck_calls: List[Dict[str, object]] = []

    async def analyze(self, images: Sequence[ImageInput]) -> List[RecognizedItem]:
        self.analyze_calls.append(list(images))
        results: List[RecognizedItem] = []
        for image in images:
            if image.index in self.failing:
                raise AdapterError(f"mock analyze failure for image {image.index}")
            if self.items is None:
                results.extend(
                    [
                        RecognizedItem(word="apple", corrected_word="apple", meaning_ko="사과", confidence=0.97),
                        RecognizedItem(word="teh", corrected_word="teh", confidence=0.4),
                    ]
                )
            else:
                results.extend(self.items.get(image.index, []))
        return results

    async def recheck(self, words: Sequence[str], images: Sequence[ImageInput]) -> List[RecheckItem]:
        self.recheck_calls.append({"words": list(words), "images": list(images)})
        if self.recheck_error is not None:
            raise self.recheck_error
        if not self.recheck_items and self.items is None:
            return [RecheckItem(word=w, corrected_word="the" if w.lower() == "teh" else w, confidence=0.95) for w in words]
        return list(self.recheck_items)


class MockDefinitionLookup(DefinitionLookup):
    def __init__(self, definitions: Optional[Mapping[str, str]] = None, failing: Sequence[str] = ()) -> None:
        self.definitions = dict(definitions or {})
        self.failing = set(failing)
        self.calls: List[str] = []

    async def lookup(self, word: str) -> Optional[DefinitionResult]:
        self.calls.append(word)
        if word in self.failing:
            raise AdapterError(f"mock lookup failure for {word!r}")
        meaning = self.definitions.get(word)
        if meaning is None:
            return None
        return DefinitionResult(part_of_speech="noun", meaning=meaning)


class MockTranslator(Translator):
    """Translate from a fixed table; unknown text (or ``fail=True``) raises."""

    def __init__(self, table: Optional[Mapping[str, str]] = None, fail: bool = False) -> None:
        self.table = dict(table or {})
        self.fail = fail
        self.calls: List[tuple] = []

    async def translate(self, text: str, target_lang: str) -> str:
        self.calls.append((text, target_lang))
        if self.fail or text not in self.table:
            raise AdapterError("mock translation failure")
        return self.table[text]


__all__ = ["MockDefinitionLookup", "MockTextRecognizer", "MockTranslator", "MockVisionAnalyzer"]
