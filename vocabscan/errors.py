# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 VocabScan contributors

"""Exception types shared across the extraction pipeline."""

from __future__ import annotations


class VocabScanError(RuntimeError):
    """Base class for errors raised by :mod:`vocabscan`."""


class AdapterError(VocabScanError):
    """A recognition, recheck, lookup or translation call failed.

    Raised at the adapter boundary for transport failures, non-2xx responses
    and malformed payloads alike. Pipeline stages treat it as a recoverable
    degradation of the affected unit.
    """


class ExtractionError(VocabScanError):
    """The operation cannot produce any result (no images, every call failed)."""


class OptionalDependencyError(VocabScanError):
    """Raised when a feature requires an optional dependency."""

    def __init__(self, dependency: str, feature: str) -> None:
        hint = f"Install vocabscan[{dependency}] or provide {dependency} to use {feature}."
        super().__init__(f"Missing optional dependency '{dependency}' for {feature}. {hint}")
