"""Library and unit-test specializations of the compression engine."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field

from variantfold.engine import BuildTypeFn, CrossBuildTypeConfig, VariantCompressionEngine
from variantfold.equivalence import LibraryEquivalenceChecker, UnitTestEquivalenceChecker
from variantfold.models import LibraryVariantData, UnitTestVariantData, project_dependency_paths
from variantfold.naming import unit_test_target_name
from variantfold.result import (
    CompressionResult,
    CompressionResultWithDecisions,
    LibraryCompressionResult,
    UnitTestCompressionResult,
)

DependencyResults = Mapping[str, LibraryCompressionResult | None]


@dataclass(frozen=True, slots=True)
class LibraryVariantCompressor:
    """Compresses library variants, honouring the state of project dependencies.

    ``dependency_results`` maps the path of every library project dependency
    to its registered result. A ``None`` value means the dependency should
    have a result but has none (its analysis failed) and is treated as
    blocking. Project dependencies missing from the mapping never block.
    """

    equivalence_checker: LibraryEquivalenceChecker = field(
        default_factory=LibraryEquivalenceChecker
    )

    def compress(
        self,
        variants: Mapping[str, LibraryVariantData],
        build_type_fn: BuildTypeFn,
        dependency_results: DependencyResults,
        *,
        check_dependency_blocking: bool = True,
        cross_build_type: bool = True,
    ) -> CompressionResultWithDecisions[LibraryVariantData]:
        if not variants:
            return CompressionResultWithDecisions(result=CompressionResult.empty())

        engine: VariantCompressionEngine[LibraryVariantData] = VariantCompressionEngine(
            name_of=lambda data: data.name,
            copy_with_name=lambda data, name: dataclasses.replace(data, name=name),
            all_equivalent=self.equivalence_checker.all_equivalent,
            build_type_fn=build_type_fn,
        )
        config: CrossBuildTypeConfig[LibraryVariantData] = CrossBuildTypeConfig(
            enabled=cross_build_type,
            equivalence_check=self.equivalence_checker.all_equivalent,
            dependency_check=lambda: _full_compression_blocker(variants, dependency_results),
        )

        if check_dependency_blocking:
            compression = engine.compress_with_blocking(
                variants,
                blocking_reason=lambda build_type, group: _build_type_blocker(
                    build_type, group, dependency_results
                ),
                cross_build_type=config,
            )
        else:
            compression = engine.compress_without_blocking(variants, cross_build_type=config)
        return compression.to_result_with_decisions()


@dataclass(frozen=True, slots=True)
class UnitTestVariantCompressor:
    """Compresses unit-test variants.

    Tests are leaves of the target graph: nothing depends on them, so their
    compression is never blocked and ignores the state of their library
    dependencies. Compressed targets are named ``<project><suffix>-test``.
    """

    equivalence_checker: UnitTestEquivalenceChecker = field(
        default_factory=UnitTestEquivalenceChecker
    )

    def compress(
        self,
        project_name: str,
        variants: Mapping[str, UnitTestVariantData],
        build_type_fn: BuildTypeFn,
        *,
        cross_build_type: bool = True,
    ) -> UnitTestCompressionResult:
        return self.compress_with_decisions(
            project_name, variants, build_type_fn, cross_build_type=cross_build_type
        ).result

    def compress_with_decisions(
        self,
        project_name: str,
        variants: Mapping[str, UnitTestVariantData],
        build_type_fn: BuildTypeFn,
        *,
        cross_build_type: bool = True,
    ) -> CompressionResultWithDecisions[UnitTestVariantData]:
        engine: VariantCompressionEngine[UnitTestVariantData] = VariantCompressionEngine(
            name_of=lambda data: data.name,
            copy_with_name=lambda data, name: dataclasses.replace(data, name=name),
            all_equivalent=self.equivalence_checker.all_equivalent,
            build_type_fn=build_type_fn,
            compress_name=lambda _data, _from, to: unit_test_target_name(project_name, to),
        )
        config: CrossBuildTypeConfig[UnitTestVariantData] = CrossBuildTypeConfig(
            enabled=cross_build_type,
            equivalence_check=self.equivalence_checker.all_equivalent,
        )
        return engine.compress_without_blocking(
            variants, cross_build_type=config
        ).to_result_with_decisions()


def _build_type_blocker(
    build_type: str,
    group: Mapping[str, LibraryVariantData],
    dependency_results: DependencyResults,
) -> str | None:
    blocking = []
    for path in project_dependency_paths(group.values()):
        if path not in dependency_results:
            continue
        result = dependency_results[path]
        if result is None or result.is_expanded(build_type):
            blocking.append(path)
    if not blocking:
        return None
    return f"blocked by dependencies: {', '.join(blocking)}"


def _full_compression_blocker(
    variants: Mapping[str, LibraryVariantData],
    dependency_results: DependencyResults,
) -> str | None:
    blocking = []
    for path in project_dependency_paths(variants.values()):
        if path not in dependency_results:
            continue
        result = dependency_results[path]
        if result is None or not result.is_fully_compressed:
            blocking.append(path)
    if not blocking:
        return None
    return f"blocked by non-fully-compressed dependencies: {', '.join(blocking)}"


__all__ = [
    "DependencyResults",
    "LibraryVariantCompressor",
    "UnitTestVariantCompressor",
]
