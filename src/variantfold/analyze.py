"""Whole-graph variant compression analysis.

Projects are visited in dependency-first order. Each library project's
variants are compressed against the registered results of its project
dependencies, registered, and then its unit-test variants are compressed
independently and registered on the separate test channel.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import TypeVar, assert_never

from variantfold.compressors import (
    DependencyResults,
    LibraryVariantCompressor,
    UnitTestVariantCompressor,
)
from variantfold.engine import BuildTypeFn
from variantfold.errors import ExtractionError, InvariantError, VariantFoldError
from variantfold.extract import VariantSource
from variantfold.graph import ProjectGraph, topological_order
from variantfold.models import (
    LibraryVariantData,
    MatchedVariant,
    Project,
    VariantKind,
    project_dependency_paths,
)
from variantfold.observability import StructuredLogger
from variantfold.policy import CompressionPolicy, ensure_policy_valid
from variantfold.result import (
    Compressed,
    CompressionDecision,
    Expanded,
    FullyCompressed,
    LibraryCompressionResult,
    SingleVariant,
    UnitTestCompressionResult,
)
from variantfold.service import VariantCompressionService

D = TypeVar("D")


@dataclass(frozen=True, slots=True)
class ProjectSummary:
    path: str
    variant_count: int
    suffixes: tuple[str, ...]
    test_suffixes: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ProjectFailure:
    path: str
    message: str
    code: str | None = None


@dataclass(frozen=True, slots=True)
class AnalysisSummary:
    analysis_timestamp: str
    projects: tuple[ProjectSummary, ...] = ()
    failures: tuple[ProjectFailure, ...] = ()

    @property
    def project_count(self) -> int:
        return len(self.projects)

    def to_dict(self) -> dict[str, object]:
        return {
            "analysis_timestamp": self.analysis_timestamp,
            "project_count": self.project_count,
            "projects": [
                {
                    "path": item.path,
                    "variant_count": item.variant_count,
                    "suffixes": list(item.suffixes),
                    "test_suffixes": list(item.test_suffixes),
                }
                for item in self.projects
            ],
            "failures": [
                {"path": item.path, "message": item.message, "code": item.code}
                for item in self.failures
            ],
        }


def write_summary(summary: AnalysisSummary, path: str | Path) -> Path:
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        json.dumps(summary.to_dict(), indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path


def describe_decision(decision: CompressionDecision) -> str:
    match decision:
        case Compressed(variants=variants, suffix=suffix):
            return f"compressed {list(variants)} -> [{suffix}]"
        case Expanded(variants=variants, reason=reason):
            return f"kept expanded {list(variants)} ({reason})"
        case SingleVariant(variant=variant, suffix=suffix):
            return f"single variant {variant} -> [{suffix}]"
        case FullyCompressed(build_types=build_types):
            return f"fully compressed [{', '.join(build_types)}] -> single target"
        case _:
            assert_never(decision)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _extract(
    extractor: Callable[[Project, MatchedVariant], D],
    project: Project,
    variant: MatchedVariant,
    kind: VariantKind,
) -> D:
    try:
        return extractor(project, variant)
    except VariantFoldError:
        raise
    except Exception as exc:
        raise ExtractionError(
            "Variant data extraction failed.",
            hint="Check the build model of the project.",
            context={
                "project": project.path,
                "variant": variant.variant_name,
                "kind": kind,
                "cause": str(exc),
            },
        ) from exc


@dataclass(slots=True)
class VariantCompressionAnalyzer:
    """Drives compression across a project graph for one run.

    The analyzer owns the run's registry and logger. The walk is sequential:
    a dependent is only analyzed after every dependency has been registered.
    """

    source: VariantSource
    policy: CompressionPolicy = field(default_factory=CompressionPolicy)
    service: VariantCompressionService = field(default_factory=VariantCompressionService)
    logger: StructuredLogger = field(default_factory=StructuredLogger)
    library_compressor: LibraryVariantCompressor = field(default_factory=LibraryVariantCompressor)
    test_compressor: UnitTestVariantCompressor = field(default_factory=UnitTestVariantCompressor)
    clock: Callable[[], datetime] = _utc_now

    def run(self, graph: ProjectGraph) -> AnalysisSummary:
        ensure_policy_valid(self.policy)
        # The registry only ever holds results of the current run.
        self.service.clear()
        ordered = topological_order(graph)
        self.logger.log(
            operation="analyze_start",
            project=None,
            variant_kind=None,
            build_type=None,
            message="Starting variant compression analysis.",
            extra={"order": [project.path for project in ordered]},
        )

        summaries: list[ProjectSummary] = []
        failures: list[ProjectFailure] = []
        for project in ordered:
            if not project.is_library:
                continue
            try:
                result = self.analyze_project(project, graph)
                # Registered before tests so test targets can reference it.
                self.service.register(project.path, result)
                test_result = None
                if self.policy.analyze_tests:
                    test_result = self.analyze_test_variants(project)
            except InvariantError:
                raise
            except Exception as exc:  # extraction is external; failures stay per-project
                failure = ProjectFailure(
                    path=project.path,
                    message=str(exc),
                    code=exc.code if isinstance(exc, VariantFoldError) else None,
                )
                failures.append(failure)
                self.logger.log(
                    operation="project_failed",
                    project=project.path,
                    variant_kind=None,
                    build_type=None,
                    message=f"Failed to analyze {project.path}: {exc}",
                    level="warning",
                    extra={
                        "code": failure.code,
                        "details": exc.details() if isinstance(exc, VariantFoldError) else {},
                    },
                )
                continue

            summaries.append(
                ProjectSummary(
                    path=project.path,
                    variant_count=len(result.variant_to_suffix),
                    suffixes=result.suffixes,
                    test_suffixes=test_result.suffixes if test_result is not None else (),
                )
            )
            self.logger.log(
                operation="library_compressed",
                project=project.path,
                variant_kind="library",
                build_type=None,
                message=(
                    f"Analyzed {project.path}: {len(result.suffixes)} targets "
                    f"from {len(result.variant_to_suffix)} variants"
                ),
                extra={"suffixes": list(result.suffixes)},
            )

        summary = AnalysisSummary(
            analysis_timestamp=self.clock().isoformat(),
            projects=tuple(summaries),
            failures=tuple(failures),
        )
        self.logger.log(
            operation="analyze_complete",
            project=None,
            variant_kind=None,
            build_type=None,
            message="Variant compression analysis complete.",
            extra={"projects": summary.project_count, "failures": len(failures)},
        )
        return summary

    def analyze_project(self, project: Project, graph: ProjectGraph) -> LibraryCompressionResult:
        """Compress one library project's variants without registering the result."""
        variants = self.source.matched_variants(project, "library")
        variant_data = {
            variant.variant_name: _extract(self.source.extract_library, project, variant, "library")
            for variant in variants
        }
        outcome = self.library_compressor.compress(
            variant_data,
            self._build_type_fn(variants),
            self._dependency_results(variant_data.values(), graph),
            check_dependency_blocking=self.policy.check_dependency_blocking,
            cross_build_type=self.policy.library_cross_build_type,
        )
        for decision in outcome.decisions:
            self.logger.log(
                operation="compression_decision",
                project=project.path,
                variant_kind="library",
                build_type=None if isinstance(decision, FullyCompressed) else decision.build_type,
                message=f"{project.path} {describe_decision(decision)}",
            )
        return outcome.result

    def analyze_test_variants(self, project: Project) -> UnitTestCompressionResult | None:
        """Compress and register one project's unit-test variants."""
        variants = self.source.matched_variants(project, "test")
        if not variants:
            self.logger.log(
                operation="tests_skipped",
                project=project.path,
                variant_kind="test",
                build_type=None,
                message=f"No test variants found for {project.path}, skipping.",
            )
            return None

        variant_data = {
            variant.variant_name: _extract(self.source.extract_unit_test, project, variant, "test")
            for variant in variants
        }
        result = self.test_compressor.compress(
            project.name,
            variant_data,
            self._build_type_fn(variants),
            cross_build_type=self.policy.test_cross_build_type,
        )
        if result.is_fully_compressed:
            compression_type = "fully compressed"
        elif not result.expanded_build_types:
            compression_type = "flavor compressed"
        else:
            compression_type = "partially expanded"
        self.logger.log(
            operation="tests_compressed",
            project=project.path,
            variant_kind="test",
            build_type=None,
            message=(
                f"{project.path} {compression_type}: {len(result.suffixes)} test targets "
                f"from {len(variant_data)} test variants"
            ),
            extra={"suffixes": list(result.suffixes)},
        )
        self.service.register_test_result(project.path, result)
        return result

    def _build_type_fn(self, variants: Sequence[MatchedVariant]) -> BuildTypeFn:
        build_types = {variant.variant_name: variant.build_type for variant in variants}
        default = self.policy.default_build_type
        return lambda name: build_types.get(name, default)

    def _dependency_results(
        self, variant_data: Iterable[LibraryVariantData], graph: ProjectGraph
    ) -> DependencyResults:
        results: dict[str, LibraryCompressionResult | None] = {}
        for path in project_dependency_paths(variant_data):
            if path in graph and graph.project(path).is_library:
                results[path] = self.service.get(path)
        return results


__all__ = [
    "AnalysisSummary",
    "ProjectFailure",
    "ProjectSummary",
    "VariantCompressionAnalyzer",
    "describe_decision",
    "write_summary",
]
