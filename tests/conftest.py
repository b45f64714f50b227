"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

import pytest

from variantfold.extract import InMemoryVariantSource


def _build_type_of(variant_name: str) -> str:
    return "release" if "release" in variant_name.lower() else "debug"


@pytest.fixture
def build_type_of() -> Callable[[str], str]:
    """Derive the build type from variant names such as ``paidReleaseUnitTest``."""
    return _build_type_of


@pytest.fixture
def inmemory_source() -> InMemoryVariantSource:
    return InMemoryVariantSource()


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: datetime(2024, 1, 1, tzinfo=UTC)
