"""Boundary with the build-model extraction layer.

The analyzer only needs matched variants and already-extracted variant
records. ``InMemoryVariantSource`` serves recorded data for tests and
scripted runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, Self, TypeVar

from variantfold.errors import ExtractionError, ValidationError
from variantfold.models import (
    LibraryVariantData,
    MatchedVariant,
    Project,
    UnitTestVariantData,
    VariantKind,
)

D = TypeVar("D")


class VariantSource(Protocol):
    def matched_variants(self, project: Project, kind: VariantKind) -> list[MatchedVariant]:
        """Return the variants of *kind* the project builds."""

    def extract_library(self, project: Project, variant: MatchedVariant) -> LibraryVariantData:
        """Extract library build data for one variant."""

    def extract_unit_test(self, project: Project, variant: MatchedVariant) -> UnitTestVariantData:
        """Extract unit-test build data for one variant."""


@dataclass(slots=True)
class InMemoryVariantSource:
    """Variant source backed by pre-recorded records."""

    name: str = "inmemory"
    _libraries: dict[str, dict[str, tuple[MatchedVariant, LibraryVariantData]]] = field(
        default_factory=dict, repr=False
    )
    _tests: dict[str, dict[str, tuple[MatchedVariant, UnitTestVariantData]]] = field(
        default_factory=dict, repr=False
    )

    def add_library_variant(
        self, project_path: str, variant: MatchedVariant, data: LibraryVariantData
    ) -> Self:
        _ensure_variant_name(variant)
        self._libraries.setdefault(project_path, {})[variant.variant_name] = (variant, data)
        return self

    def add_test_variant(
        self, project_path: str, variant: MatchedVariant, data: UnitTestVariantData
    ) -> Self:
        _ensure_variant_name(variant)
        self._tests.setdefault(project_path, {})[variant.variant_name] = (variant, data)
        return self

    def matched_variants(self, project: Project, kind: VariantKind) -> list[MatchedVariant]:
        records = self._libraries if kind == "library" else self._tests
        return [variant for variant, _ in records.get(project.path, {}).values()]

    def extract_library(self, project: Project, variant: MatchedVariant) -> LibraryVariantData:
        return _lookup(self._libraries, project, variant, kind="library")

    def extract_unit_test(self, project: Project, variant: MatchedVariant) -> UnitTestVariantData:
        return _lookup(self._tests, project, variant, kind="test")


def _lookup(
    records: dict[str, dict[str, tuple[MatchedVariant, D]]],
    project: Project,
    variant: MatchedVariant,
    *,
    kind: VariantKind,
) -> D:
    try:
        _, data = records[project.path][variant.variant_name]
    except KeyError as exc:
        raise ExtractionError(
            "No recorded variant data for project.",
            hint="Record the variant with add_library_variant() or add_test_variant().",
            context={"project": project.path, "variant": variant.variant_name, "kind": kind},
        ) from exc
    return data


def _ensure_variant_name(variant: MatchedVariant) -> None:
    if not variant.variant_name:
        raise ValidationError("Variant names must be non-empty.")
    if not variant.build_type:
        raise ValidationError(
            "Variant build type must be non-empty.",
            context={"variant": variant.variant_name},
        )


__all__ = ["InMemoryVariantSource", "VariantSource"]
