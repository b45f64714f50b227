"""Compression result contract and reporting-only decision types."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Generic, TypeVar

from variantfold.errors import InvariantError
from variantfold.models import LibraryVariantData, UnitTestVariantData

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class CompressionResult(Generic[T]):
    """Outcome of compressing one project's variants of a single kind.

    ``targets_by_suffix`` maps each generated target suffix to its data (1:1),
    ``variant_to_suffix`` maps every original variant to the suffix it was
    folded into (many:1) and ``expanded_build_types`` lists build types whose
    variants were kept as separate targets.
    """

    targets_by_suffix: Mapping[str, T]
    variant_to_suffix: Mapping[str, str]
    expanded_build_types: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        # Snapshot the mappings so registered results cannot change later.
        targets = MappingProxyType(dict(self.targets_by_suffix))
        mapping = MappingProxyType(dict(self.variant_to_suffix))
        object.__setattr__(self, "targets_by_suffix", targets)
        object.__setattr__(self, "variant_to_suffix", mapping)
        object.__setattr__(self, "expanded_build_types", frozenset(self.expanded_build_types))
        dangling = sorted(
            name
            for name, suffix in self.variant_to_suffix.items()
            if suffix not in self.targets_by_suffix
        )
        if dangling:
            raise InvariantError(
                "Variants map to suffixes without a generated target.",
                context={
                    "variants": ", ".join(dangling),
                    "suffixes": ", ".join(sorted(self.targets_by_suffix)),
                },
            )

    @classmethod
    def empty(cls) -> CompressionResult[T]:
        return cls(targets_by_suffix={}, variant_to_suffix={}, expanded_build_types=frozenset())

    @property
    def suffixes(self) -> tuple[str, ...]:
        return tuple(sorted(self.targets_by_suffix))

    @property
    def targets(self) -> tuple[T, ...]:
        return tuple(self.targets_by_suffix[suffix] for suffix in self.suffixes)

    @property
    def is_fully_compressed(self) -> bool:
        return len(self.targets_by_suffix) == 1 and "" in self.targets_by_suffix

    def is_expanded(self, build_type: str) -> bool:
        return build_type in self.expanded_build_types

    def suffix_for_variant(self, variant_name: str) -> str:
        return self.variant_to_suffix[variant_name]

    def data_for_suffix(self, suffix: str) -> T:
        return self.targets_by_suffix[suffix]


LibraryCompressionResult = CompressionResult[LibraryVariantData]
UnitTestCompressionResult = CompressionResult[UnitTestVariantData]


# Decisions describe what happened after the fact. They are emitted for
# logging and summaries only.


@dataclass(frozen=True, slots=True)
class Compressed:
    build_type: str
    variants: tuple[str, ...]
    suffix: str


@dataclass(frozen=True, slots=True)
class Expanded:
    build_type: str
    variants: tuple[str, ...]
    reason: str


@dataclass(frozen=True, slots=True)
class SingleVariant:
    build_type: str
    variant: str
    suffix: str


@dataclass(frozen=True, slots=True)
class FullyCompressed:
    build_types: tuple[str, ...]
    variants: tuple[str, ...]


CompressionDecision = Compressed | Expanded | SingleVariant | FullyCompressed


@dataclass(frozen=True, slots=True)
class CompressionResultWithDecisions(Generic[T]):
    result: CompressionResult[T]
    decisions: tuple[CompressionDecision, ...] = field(default_factory=tuple)


__all__ = [
    "Compressed",
    "CompressionDecision",
    "CompressionResult",
    "CompressionResultWithDecisions",
    "Expanded",
    "FullyCompressed",
    "LibraryCompressionResult",
    "SingleVariant",
    "UnitTestCompressionResult",
]
