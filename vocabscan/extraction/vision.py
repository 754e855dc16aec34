# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 VocabScan contributors

"""Vision analyzer backed by an OpenAI-compatible chat-completions endpoint.

Images are sent inline as base64 data URLs with JSON mode enabled and
``temperature=0``. When the primary model errors out the request is retried
once on the fallback model. Responses are recovered with
:func:`~vocabscan.utils.json_utils.extract_json_object`, validated against the
schemas in :mod:`vocabscan.api_spec` and mapped to typed items, so the rest of
the pipeline never sees raw model output. Every failure surfaces as
:class:`~vocabscan.errors.AdapterError`.
"""
from __future__ import annotations

import base64
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx
from jsonschema import Draft202012Validator, ValidationError
from pydantic import ValidationError as ModelValidationError

from ..api_spec import (
    ANALYZE_RESPONSE_SCHEMA,
    RECHECK_RESPONSE_SCHEMA,
    SYSTEM_PROMPT_ANALYZE,
    SYSTEM_PROMPT_RECHECK,
    USER_PROMPT_ANALYZE,
    render_user_prompt_recheck,
)
from ..config import DEFAULT_CALL_TIMEOUT_SEC, Settings
from ..errors import AdapterError
from ..utils.json_utils import extract_json_object
from .interfaces import VisionAnalyzer
from .models import ImageInput, RecheckItem, RecognizedItem

logger = logging.getLogger(__name__)

_ERROR_BODY_LIMIT = 800


def _image_parts(images: Sequence[ImageInput]) -> List[Dict[str, Any]]:
    parts: List[Dict[str, Any]] = []
    for img in images:
        b64 = base64.b64encode(img.data).decode("ascii")
        parts.append({"type": "image_url", "image_url": {"url": f"data:{img.mime};base64,{b64}"}})
    return parts


def make_analyze_messages(images: Sequence[ImageInput]) -> List[Dict[str, Any]]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT_ANALYZE},
        {"role": "user", "content": [{"type": "text", "text": USER_PROMPT_ANALYZE}, *_image_parts(images)]},
    ]


def make_recheck_messages(words: Sequence[str], images: Sequence[ImageInput]) -> List[Dict[str, Any]]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT_RECHECK},
        {
            "role": "user",
            "content": [{"type": "text", "text": render_user_prompt_recheck(words)}, *_image_parts(images)],
        },
    ]


def _validated_items(payload: Any, schema: Dict[str, Any]) -> List[Dict[str, Any]]:
    if payload is None:
        raise AdapterError("Invalid JSON from AI")
    try:
        Draft202012Validator(schema).validate(payload)
    except ValidationError as exc:
        raise AdapterError(f"AI response does not match {schema.get('title')}: {exc.message}") from exc
    return list(payload["items"])


class OpenAIVisionAnalyzer(VisionAnalyzer):
    """Analyze word-list images with a vision-capable chat model.

    Args:
        api_key: Bearer token for the endpoint.
        model: Primary model name.
        fallback_model: Model retried once when the primary call fails;
            ``None`` disables the retry.
        base_url: API root, e.g. ``https://api.openai.com/v1``.
        timeout_sec: Per-request timeout.
        transport: Optional ``httpx`` transport (tests inject a
            ``httpx.MockTransport`` here).
    """

    def __init__(
        self,
        api_key: Optional[str],
        *,
        model: str = "gpt-4o",
        fallback_model: Optional[str] = "gpt-4o-mini",
        base_url: str = "https://api.openai.com/v1",
        timeout_sec: float = DEFAULT_CALL_TIMEOUT_SEC,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.fallback_model = fallback_model
        self.endpoint = base_url.rstrip("/") + "/chat/completions"
        self.timeout = httpx.Timeout(timeout_sec)
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "OpenAIVisionAnalyzer":
        return cls(
            settings.openai_api_key,
            model=settings.openai_model,
            fallback_model=settings.openai_fallback_model,
            base_url=settings.openai_base_url,
            timeout_sec=settings.call_timeout_sec,
            **kwargs,
        )

    async def _call(self, client: httpx.AsyncClient, model: str, messages: List[Dict[str, Any]]) -> str:
        body = {
            "model": model,
            "messages": messages,
            "temperature": 0,
            "response_format": {"type": "json_object"},
        }
        try:
            res = await client.post(self.endpoint, json=body)
        except httpx.HTTPError as exc:
            raise AdapterError(f"AI request failed [{model}]: {exc}") from exc
        if res.status_code >= 400:
            raise AdapterError(f"AI error {res.status_code} [{model}]: {res.text[:_ERROR_BODY_LIMIT]}")
        try:
            envelope = res.json()
            return envelope["choices"][0]["message"]["content"] or ""
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise AdapterError(f"Unexpected completion payload [{model}]") from exc

    async def complete_json(self, messages: List[Dict[str, Any]]) -> Any:
        """Run one JSON-mode completion, retrying on the fallback model."""
        if not self.api_key:
            raise AdapterError("OPENAI_API_KEY is not configured")

        headers = {"Authorization": f"Bearer {self.api_key}"}
        async with httpx.AsyncClient(timeout=self.timeout, headers=headers, transport=self._transport) as client:
            try:
                content = await self._call(client, self.model, messages)
            except AdapterError as exc:
                if not self.fallback_model:
                    raise
                logger.warning("primary model failed, retrying on %s: %s", self.fallback_model, exc)
                content = await self._call(client, self.fallback_model, messages)
        return extract_json_object(content)

    async def analyze(self, images: Sequence[ImageInput]) -> List[RecognizedItem]:
        payload = await self.complete_json(make_analyze_messages(images))
        items: List[RecognizedItem] = []
        for raw in _validated_items(payload, ANALYZE_RESPONSE_SCHEMA):
            try:
                items.append(RecognizedItem.model_validate(raw))
            except ModelValidationError:
                logger.debug("skipping malformed analyze item %r", raw)
        return items

    async def recheck(self, words: Sequence[str], images: Sequence[ImageInput]) -> List[RecheckItem]:
        payload = await self.complete_json(make_recheck_messages(words, images))
        items: List[RecheckItem] = []
        for raw in _validated_items(payload, RECHECK_RESPONSE_SCHEMA):
            try:
                items.append(RecheckItem.model_validate(raw))
            except ModelValidationError:
                logger.debug("skipping malformed recheck item %r", raw)
        return items


__all__ = ["OpenAIVisionAnalyzer", "make_analyze_messages", "make_recheck_messages"]
