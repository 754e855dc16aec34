"""Data models for the vocabulary extraction pipeline.

These models keep inputs and outputs explicit across each stage of the
pipeline so recognition adapters can be swapped without changing data exchange
formats. Pydantic is used for validation and for the JSON shapes exchanged with
the HTTP service and exporters.
"""
from __future__ import annotations

import mimetypes
from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..config import DEFAULT_LOW_CONFIDENCE


class EntrySource(str, Enum):
    IMAGE_OCR = "image-ocr"
    IMAGE_AI = "image-ai"


class CaseMode(str, Enum):
    LOWER = "lower"
    UPPER = "upper"
    NONE = "none"


class MeaningLang(str, Enum):
    KO = "ko"
    EN = "en"


class Engine(str, Enum):
    OCR = "ocr"
    AI = "ai"


class PipelineState(str, Enum):
    INITIAL_PASS_COMPLETE = "initial-pass-complete"
    RECHECK_COMPLETE = "recheck-complete"


def is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _coerce_confidence(value):
    if value is None:
        return None
    try:
        conf = float(value)
    except (TypeError, ValueError):
        return None
    return min(1.0, max(0.0, conf))


class Entry(BaseModel):
    """One vocabulary record tracked by the pipeline.

    ``meaning_ko`` of ``None`` means the meaning is not known yet, which is
    distinct from an empty string the user typed in.
    """

    word: str
    corrected_word: str = ""
    meaning_ko: Optional[str] = None
    part_of_speech: Optional[str] = None
    example: Optional[str] = None
    confidence: Optional[float] = Field(None, ge=0.0, le=1.0)
    source: EntrySource = EntrySource.IMAGE_OCR

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value):
        return _coerce_confidence(value)

    @model_validator(mode="after")
    def _default_corrected_word(self) -> "Entry":
        if not self.corrected_word:
            self.corrected_word = self.word
        return self

    @property
    def best_word(self) -> str:
        return self.corrected_word or self.word

    @property
    def has_meaning(self) -> bool:
        return not is_blank(self.meaning_ko)

    def is_low_confidence(self, threshold: float = DEFAULT_LOW_CONFIDENCE) -> bool:
        # Unscored entries count as low: nothing vouches for them.
        return self.confidence is None or self.confidence < threshold


class ImageInput(BaseModel):
    """Single uploaded image, kept with its position in the upload order."""

    index: int = Field(..., ge=0)
    filename: str = "image"
    data: bytes
    mime: str = "image/png"

    @classmethod
    def from_path(cls, path: str | Path, index: int) -> "ImageInput":
        p = Path(path)
        mime, _ = mimetypes.guess_type(p.name)
        return cls(index=index, filename=p.name, data=p.read_bytes(), mime=mime or "image/png")


class RecognizedItem(BaseModel):
    """Structured item returned by a vision analyzer."""

    word: str
    corrected_word: Optional[str] = None
    meaning_ko: Optional[str] = None
    confidence: Optional[float] = Field(None, ge=0.0, le=1.0)

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value):
        return _coerce_confidence(value)


class RecheckItem(BaseModel):
    """Verdict for one word returned by a recheck pass."""

    word: str
    corrected_word: str
    confidence: Optional[float] = Field(None, ge=0.0, le=1.0)

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value):
        return _coerce_confidence(value)


class DefinitionResult(BaseModel):
    part_of_speech: str = ""
    meaning: str = ""
    example: str = ""


class PipelineResult(BaseModel):
    entries: List[Entry]
    warnings: List[str] = Field(default_factory=list)
    state: Optional[PipelineState] = None
    low_confidence: List[str] = Field(default_factory=list)


__all__ = [
    "CaseMode",
    "DefinitionResult",
    "Entry",
    "Engine",
    "EntrySource",
    "ImageInput",
    "MeaningLang",
    "PipelineResult",
    "PipelineState",
    "RecheckItem",
    "RecognizedItem",
    "is_blank",
]
