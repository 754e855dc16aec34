"""JSON serialization helpers."""

from __future__ import annotations

import dataclasses
import json
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel


def json_ready(obj: Any):
    """Return a JSON-serializable representation of ``obj``.

    The helper recursively converts mappings, sequences, dataclasses, pydantic
    models, enums and sets. Unknown values are returned as-is so native
    ``json`` can handle str/int/bool types directly.
    """

    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj

    if isinstance(obj, Enum):
        return json_ready(obj.value)

    if isinstance(obj, BaseModel):
        return json_ready(obj.model_dump(mode="json"))

    if isinstance(obj, dict):
        return {k: json_ready(v) for k, v in obj.items()}

    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return json_ready(dataclasses.asdict(obj))

    if isinstance(obj, (list, tuple)):
        return [json_ready(v) for v in obj]

    if isinstance(obj, set):
        return [json_ready(v) for v in obj]

    if isinstance(obj, (bytes, bytearray)):
        return obj.decode("utf-8", errors="ignore")

    return obj


def extract_json_object(text: Optional[str]) -> Optional[Any]:
    """Parse the span from the first ``{`` to the last ``}`` of ``text``.

    Chat models occasionally wrap their JSON in prose or code fences even in
    JSON mode. Returns ``None`` when no object can be recovered.
    """

    if not text:
        return None
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        return None
    try:
        return json.loads(text[start : end + 1])
    except json.JSONDecodeError:
        return None


__all__ = ["extract_json_object", "json_ready"]
