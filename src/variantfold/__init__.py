"""Public package entrypoint for build-variant compression."""

from .analyze import (
    AnalysisSummary,
    ProjectFailure,
    ProjectSummary,
    VariantCompressionAnalyzer,
    describe_decision,
    write_summary,
)
from .compressors import LibraryVariantCompressor, UnitTestVariantCompressor
from .engine import CrossBuildTypeConfig, FlavorCompression, VariantCompressionEngine
from .equivalence import LibraryEquivalenceChecker, UnitTestEquivalenceChecker
from .errors import (
    DependencyCycleError,
    ErrorCode,
    ExtractionError,
    InvariantError,
    SuffixCollisionError,
    ValidationError,
    VariantFoldError,
)
from .extract import InMemoryVariantSource, VariantSource
from .graph import ProjectGraph, topological_order
from .models import (
    ExternalDependency,
    LibraryVariantData,
    LintConfigData,
    MatchedVariant,
    Project,
    ProjectDependency,
    UnitTestVariantData,
)
from .naming import normalize_variant_suffix
from .observability import StructuredLogger
from .policy import CompressionPolicy
from .result import (
    Compressed,
    CompressionDecision,
    CompressionResult,
    CompressionResultWithDecisions,
    Expanded,
    FullyCompressed,
    LibraryCompressionResult,
    SingleVariant,
    UnitTestCompressionResult,
)
from .service import VariantCompressionService

__all__ = [
    "AnalysisSummary",
    "Compressed",
    "CompressionDecision",
    "CompressionPolicy",
    "CompressionResult",
    "CompressionResultWithDecisions",
    "CrossBuildTypeConfig",
    "DependencyCycleError",
    "ErrorCode",
    "Expanded",
    "ExternalDependency",
    "ExtractionError",
    "FlavorCompression",
    "FullyCompressed",
    "InMemoryVariantSource",
    "InvariantError",
    "LibraryCompressionResult",
    "LibraryEquivalenceChecker",
    "LibraryVariantCompressor",
    "LibraryVariantData",
    "LintConfigData",
    "MatchedVariant",
    "Project",
    "ProjectDependency",
    "ProjectFailure",
    "ProjectGraph",
    "ProjectSummary",
    "SingleVariant",
    "StructuredLogger",
    "SuffixCollisionError",
    "UnitTestCompressionResult",
    "UnitTestEquivalenceChecker",
    "UnitTestVariantCompressor",
    "UnitTestVariantData",
    "ValidationError",
    "VariantCompressionAnalyzer",
    "VariantCompressionEngine",
    "VariantCompressionService",
    "VariantFoldError",
    "VariantSource",
    "describe_decision",
    "normalize_variant_suffix",
    "topological_order",
    "write_summary",
]
