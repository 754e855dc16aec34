# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 VocabScan contributors

"""HTTP clients for definition lookup and translation."""
from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from ..config import DEFAULT_CALL_TIMEOUT_SEC, Settings
from ..errors import AdapterError
from .interfaces import DefinitionLookup, Translator
from .models import DefinitionResult

logger = logging.getLogger(__name__)


def _first_definition(data: Any) -> Optional[DefinitionResult]:
    """First sense of the first headword in a dictionaryapi.dev payload."""
    if not isinstance(data, list) or not data or not isinstance(data[0], dict):
        return None
    first = data[0]
    pos = meaning = example = ""
    meanings = first.get("meanings") or []
    if meanings and isinstance(meanings[0], dict):
        pos = meanings[0].get("partOfSpeech") or ""
        definitions = meanings[0].get("definitions") or []
        if definitions and isinstance(definitions[0], dict):
            meaning = definitions[0].get("definition") or ""
            example = definitions[0].get("example") or ""
    if not meaning:
        meaning = first.get("phonetic") or ""
    if not meaning:
        return None
    return DefinitionResult(part_of_speech=pos, meaning=meaning, example=example)


class DictionaryApiLookup(DefinitionLookup):
    """English definitions from the free dictionaryapi.dev service."""

    def __init__(
        self,
        base_url: str = "https://api.dictionaryapi.dev/api/v2/entries/en",
        *,
        timeout_sec: float = DEFAULT_CALL_TIMEOUT_SEC,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = httpx.Timeout(timeout_sec)
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "DictionaryApiLookup":
        return cls(settings.dictionary_url, timeout_sec=settings.call_timeout_sec, **kwargs)

    async def lookup(self, word: str) -> Optional[DefinitionResult]:
        url = f"{self.base_url}/{quote(word)}"
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                res = await client.get(url)
            except httpx.HTTPError as exc:
                raise AdapterError(f"dictionary request failed: {exc}") from exc
        if res.status_code == 404:
            return None
        if res.status_code >= 400:
            raise AdapterError(f"dictionary error {res.status_code}")
        try:
            return _first_definition(res.json())
        except ValueError as exc:
            raise AdapterError("dictionary returned invalid JSON") from exc


class MyMemoryTranslator(Translator):
    """Machine translation through the MyMemory public API.

    Quality is best-effort; callers tag untranslated text instead of relying
    on this succeeding.
    """

    def __init__(
        self,
        url: str = "https://api.mymemory.translated.net/get",
        *,
        source_lang: str = "en",
        timeout_sec: float = DEFAULT_CALL_TIMEOUT_SEC,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url
        self.source_lang = source_lang
        self.timeout = httpx.Timeout(timeout_sec)
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "MyMemoryTranslator":
        return cls(settings.translate_url, timeout_sec=settings.call_timeout_sec, **kwargs)

    async def translate(self, text: str, target_lang: str) -> str:
        params = {"q": text, "langpair": f"{self.source_lang}|{target_lang}"}
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                res = await client.get(self.url, params=params)
            except httpx.HTTPError as exc:
                raise AdapterError(f"translation request failed: {exc}") from exc
        if res.status_code >= 400:
            raise AdapterError(f"translation error {res.status_code}")
        try:
            data = res.json()
        except ValueError as exc:
            raise AdapterError("translation returned invalid JSON") from exc

        status = str(data.get("responseStatus", "200")) if isinstance(data, dict) else ""
        if status != "200":
            details = data.get("responseDetails") if isinstance(data, dict) else None
            raise AdapterError(f"translation rejected ({status}): {details}")
        translated = ((data.get("responseData") or {}).get("translatedText") or "").strip()
        if not translated:
            raise AdapterError("translation returned no text")
        return translated


__all__ = ["DictionaryApiLookup", "MyMemoryTranslator"]
