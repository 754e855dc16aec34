# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 VocabScan contributors

"""Environment-driven settings for the pipeline, adapters and HTTP service."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_LOW_CONFIDENCE = 0.85
DEFAULT_CALL_TIMEOUT_SEC = 60.0


def _env_str(name: str, default: Optional[str] = None) -> Optional[str]:
    raw = os.environ.get(name)
    if raw is None:
        return default
    raw = raw.strip()
    return raw or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    raw = raw.strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    raw = raw.strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_truthy(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() not in {"0", "false", "no", "off", ""}


@dataclass
class Settings:
    """Runtime knobs. Build with :func:`load_settings` to honour the environment."""

    openai_api_key: Optional[str] = None
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4o"
    openai_fallback_model: Optional[str] = "gpt-4o-mini"
    call_timeout_sec: float = DEFAULT_CALL_TIMEOUT_SEC
    low_confidence_threshold: float = DEFAULT_LOW_CONFIDENCE
    max_upload_mb: int = 10
    backfill_concurrency: int = 4
    tesseract_lang: str = "eng"
    allow_pytesseract: bool = True
    dictionary_url: str = "https://api.dictionaryapi.dev/api/v2/entries/en"
    translate_url: str = "https://api.mymemory.translated.net/get"
    log_format: str = "json"
    log_level: str = "INFO"

    @property
    def max_upload_bytes(self) -> int:
        return int(self.max_upload_mb) * 1024 * 1024


def load_settings() -> Settings:
    timeout = _env_float("VOCABSCAN_CALL_TIMEOUT_SEC", DEFAULT_CALL_TIMEOUT_SEC)
    if timeout <= 0:
        timeout = DEFAULT_CALL_TIMEOUT_SEC
    threshold = _env_float("VOCABSCAN_LOW_CONFIDENCE", DEFAULT_LOW_CONFIDENCE)
    threshold = min(1.0, max(0.0, threshold))
    return Settings(
        openai_api_key=_env_str("VOCABSCAN_OPENAI_API_KEY") or _env_str("OPENAI_API_KEY"),
        openai_base_url=_env_str("VOCABSCAN_OPENAI_BASE_URL", Settings.openai_base_url) or "",
        openai_model=_env_str("VOCABSCAN_OPENAI_MODEL", Settings.openai_model) or "",
        openai_fallback_model=_env_str("VOCABSCAN_OPENAI_FALLBACK_MODEL", Settings.openai_fallback_model),
        call_timeout_sec=timeout,
        low_confidence_threshold=threshold,
        max_upload_mb=max(1, _env_int("VOCABSCAN_MAX_UPLOAD_MB", 10)),
        backfill_concurrency=max(1, _env_int("VOCABSCAN_BACKFILL_CONCURRENCY", 4)),
        tesseract_lang=_env_str("VOCABSCAN_TESSERACT_LANG", "eng") or "eng",
        allow_pytesseract=_env_truthy("VOCABSCAN_ALLOW_PYTESSERACT", True),
        dictionary_url=_env_str("VOCABSCAN_DICTIONARY_URL", Settings.dictionary_url) or "",
        translate_url=_env_str("VOCABSCAN_TRANSLATE_URL", Settings.translate_url) or "",
        log_format=(_env_str("VOCABSCAN_API_LOG_FORMAT", "json") or "json").lower(),
        log_level=(_env_str("VOCABSCAN_API_LOG_LEVEL", "INFO") or "INFO").upper(),
    )


__all__ = ["DEFAULT_CALL_TIMEOUT_SEC", "DEFAULT_LOW_CONFIDENCE", "Settings", "load_settings"]
