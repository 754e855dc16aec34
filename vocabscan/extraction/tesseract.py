"""Text recognition backed by pytesseract.

This module provides the local implementation of the ``TextRecognizer``
protocol. It enables LSTM-based OCR (``--oem 3``) and a single-column page
segmentation mode (``--psm 6``) by default, which suits printed word lists.
Recognition runs in a worker thread so concurrent images do not block the
event loop.
"""
from __future__ import annotations

import io
import os

import anyio
import pytesseract
from PIL import Image, UnidentifiedImageError

from ..errors import AdapterError
from .interfaces import TextRecognizer
from .models import ImageInput


def _pytesseract_allowed() -> bool:
    raw = os.environ.get("VOCABSCAN_ALLOW_PYTESSERACT")
    if raw is None:
        return True
    return raw.strip().lower() not in {"0", "false", "no", "off"}


class TesseractTextRecognizer(TextRecognizer):
    """Run OCR on whole images using pytesseract.

    Args:
        lang: Language hint passed to Tesseract (e.g., ``"eng"`` or
            ``"eng+kor"`` when meanings are printed next to the words).
        oem: OCR Engine Mode. The default ``3`` enables Tesseract's LSTM engine.
        psm: Page segmentation mode. The default ``6`` treats the input as a
            uniform block of text.
        extra_config: Additional custom flags forwarded to pytesseract.
    """

    def __init__(self, lang: str = "eng", oem: int = 3, psm: int = 6, extra_config: str = "") -> None:
        if not _pytesseract_allowed():
            raise RuntimeError(
                "pytesseract is disabled by VOCABSCAN_ALLOW_PYTESSERACT; set it to 1/true to enable"
            )
        self.lang = lang
        base_config = f"--oem {oem} --psm {psm}"
        self.config = f"{base_config} {extra_config}".strip()

    def recognize_sync(self, image: ImageInput) -> str:
        try:
            with Image.open(io.BytesIO(image.data)) as pil_image:
                pil_image.load()
                text = pytesseract.image_to_string(pil_image, lang=self.lang, config=self.config)
        except UnidentifiedImageError as exc:
            raise AdapterError(f"{image.filename}: not a readable image") from exc
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError, OSError) as exc:
            raise AdapterError(f"{image.filename}: OCR failed ({exc})") from exc
        return text or ""

    async def recognize(self, image: ImageInput) -> str:
        return await anyio.to_thread.run_sync(self.recognize_sync, image)


__all__ = ["TesseractTextRecognizer"]
