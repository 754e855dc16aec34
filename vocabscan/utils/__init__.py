"""Utility helpers for VocabScan."""

from .json_utils import extract_json_object, json_ready

__all__ = ["extract_json_object", "json_ready"]
