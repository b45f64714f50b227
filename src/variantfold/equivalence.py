"""Structural equivalence predicates for library and unit-test variants.

Equivalence is exact over a fixed attribute set. Project dependencies are
compared by the project they reference, never by the compressed suffix
they currently carry, since that suffix may still change while the
dependency's own compression settles.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import TypeVar

from variantfold.models import (
    Dependency,
    LibraryVariantData,
    ProjectDependency,
    UnitTestVariantData,
)

V = TypeVar("V")


def normalize_dependencies(deps: Iterable[Dependency]) -> frozenset[tuple[str, str]]:
    """Reduce dependencies to suffix-free identities."""
    normalized: set[tuple[str, str]] = set()
    for dep in deps:
        if isinstance(dep, ProjectDependency):
            normalized.add(("project", dep.project_path))
        else:
            normalized.add(("external", dep.coordinate))
    return frozenset(normalized)


@dataclass(frozen=True, slots=True)
class LibraryEquivalenceChecker:
    def equivalent(self, first: LibraryVariantData, other: LibraryVariantData) -> bool:
        return (
            first.srcs == other.srcs
            and first.resource_sets == other.resource_sets
            and first.plugins == other.plugins
            and first.databinding == other.databinding
            and first.compose == other.compose
            and first.res_values == other.res_values
            and first.build_config_fields == other.build_config_fields
            and first.package_name == other.package_name
            and first.manifest_file == other.manifest_file
            and first.lint_config == other.lint_config
            and first.tags == other.tags
            and normalize_dependencies(first.deps) == normalize_dependencies(other.deps)
        )

    def all_equivalent(self, variants: Sequence[LibraryVariantData]) -> bool:
        return _all_equivalent_to_first(variants, self.equivalent)


@dataclass(frozen=True, slots=True)
class UnitTestEquivalenceChecker:
    """Associates are left out: they name the variant-specific library target."""

    def equivalent(self, first: UnitTestVariantData, other: UnitTestVariantData) -> bool:
        return (
            first.srcs == other.srcs
            and first.additional_src_sets == other.additional_src_sets
            and first.resources == other.resources
            and first.compose == other.compose
            and first.test_size == other.test_size
            and first.custom_package == other.custom_package
            and first.tags == other.tags
            and normalize_dependencies(first.deps) == normalize_dependencies(other.deps)
        )

    def all_equivalent(self, variants: Sequence[UnitTestVariantData]) -> bool:
        return _all_equivalent_to_first(variants, self.equivalent)


def _all_equivalent_to_first(
    variants: Sequence[V], equivalent: Callable[[V, V], bool]
) -> bool:
    # Transitivity is assumed: every element is compared with the first only.
    if len(variants) <= 1:
        return True
    first = variants[0]
    return all(equivalent(first, other) for other in variants[1:])


__all__ = [
    "LibraryEquivalenceChecker",
    "UnitTestEquivalenceChecker",
    "normalize_dependencies",
]
