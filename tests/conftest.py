from __future__ import annotations

from pathlib import Path

import pytest

from sigscan.collector import SignatureCollector
from sigscan.registry import SignatureRegistry
from tests._fixtures.source_builder import SourceBuilder


@pytest.fixture
def source_builder(tmp_path: Path) -> SourceBuilder:
    """Provide a reusable input writer rooted at the pytest tmp_path."""
    return SourceBuilder(tmp_path)


@pytest.fixture
def registry() -> SignatureRegistry:
    return SignatureRegistry()


@pytest.fixture
def collector(registry: SignatureRegistry) -> SignatureCollector:
    """Collector with the default minimum signature size."""
    return SignatureCollector(registry)
