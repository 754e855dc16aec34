# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 VocabScan contributors

"""Pytest configuration shared across the suite."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from vocabscan.extraction import ImageInput  # noqa: E402


@pytest.fixture
def images():
    return [ImageInput(index=i, filename=f"page-{i}.png", data=f"img-{i}".encode()) for i in range(2)]
