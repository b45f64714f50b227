"""Generic two-phase variant compression engine.

The engine is parameterized by the operations that differ between variant
kinds (naming, copying, equivalence, optional dependency blocking) and
never by subclassing.

Phase 1 groups variants by build type and folds each group of equivalent,
unblocked variants into one target named by the build-type suffix
(``-debug``). Phase 2, when configured, folds the resulting build-type
targets into a single suffix-free target if Phase 1 expanded nothing and
every build-type target is equivalent to the others.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from variantfold.errors import SuffixCollisionError
from variantfold.naming import normalize_variant_suffix
from variantfold.result import (
    Compressed,
    CompressionDecision,
    CompressionResult,
    CompressionResultWithDecisions,
    Expanded,
    FullyCompressed,
    SingleVariant,
)

T = TypeVar("T")

BuildTypeFn = Callable[[str], str]
BlockingReasonFn = Callable[[str, Mapping[str, T]], str | None]

DIFFERING_CONFIGURATION = "variants differ in configuration"


@dataclass(frozen=True, slots=True)
class CrossBuildTypeConfig(Generic[T]):
    """Phase 2 settings.

    ``dependency_check`` returns a blocking reason, or ``None`` when the
    dependencies allow a single suffix-free target.
    """

    enabled: bool
    equivalence_check: Callable[[Sequence[T]], bool]
    dependency_check: Callable[[], str | None] | None = None


@dataclass(frozen=True, slots=True)
class FlavorCompression(Generic[T]):
    """Aggregated engine output, convertible to the public result types."""

    targets_by_suffix: Mapping[str, T]
    variant_to_suffix: Mapping[str, str]
    expanded_build_types: frozenset[str]
    decisions: tuple[CompressionDecision, ...] = ()

    def to_result(self) -> CompressionResult[T]:
        return CompressionResult(
            targets_by_suffix=self.targets_by_suffix,
            variant_to_suffix=self.variant_to_suffix,
            expanded_build_types=self.expanded_build_types,
        )

    def to_result_with_decisions(self) -> CompressionResultWithDecisions[T]:
        return CompressionResultWithDecisions(result=self.to_result(), decisions=self.decisions)


@dataclass(frozen=True, slots=True)
class _BuildTypeOutcome(Generic[T]):
    build_type: str
    targets_by_suffix: dict[str, T]
    variant_to_suffix: dict[str, str]
    is_expanded: bool
    decision: CompressionDecision


@dataclass(frozen=True, slots=True)
class VariantCompressionEngine(Generic[T]):
    name_of: Callable[[T], str]
    copy_with_name: Callable[[T, str], T]
    all_equivalent: Callable[[Sequence[T]], bool]
    build_type_fn: BuildTypeFn
    normalize_suffix: Callable[[str], str] = normalize_variant_suffix
    compress_name: Callable[[T, str, str], str] | None = None

    def compress_with_blocking(
        self,
        variants: Mapping[str, T],
        blocking_reason: BlockingReasonFn[T],
        cross_build_type: CrossBuildTypeConfig[T] | None = None,
    ) -> FlavorCompression[T]:
        """Compress library-style variants whose dependencies may block folding."""
        return self._compress(variants, blocking_reason, cross_build_type)

    def compress_without_blocking(
        self,
        variants: Mapping[str, T],
        cross_build_type: CrossBuildTypeConfig[T] | None = None,
    ) -> FlavorCompression[T]:
        """Compress leaf variants independently of any dependency state."""
        return self._compress(variants, None, cross_build_type)

    def _compress(
        self,
        variants: Mapping[str, T],
        blocking_reason: BlockingReasonFn[T] | None,
        cross_build_type: CrossBuildTypeConfig[T] | None,
    ) -> FlavorCompression[T]:
        if not variants:
            return FlavorCompression(
                targets_by_suffix={},
                variant_to_suffix={},
                expanded_build_types=frozenset(),
            )

        by_build_type: dict[str, dict[str, T]] = defaultdict(dict)
        for name in sorted(variants):
            by_build_type[self.build_type_fn(name)][name] = variants[name]

        outcomes = [
            self._compress_build_type(build_type, by_build_type[build_type], blocking_reason)
            for build_type in sorted(by_build_type)
        ]
        flavor_compressed = self._merge(outcomes)

        if cross_build_type is not None and cross_build_type.enabled:
            return self._try_full_compression(flavor_compressed, cross_build_type)
        return flavor_compressed

    def _compress_build_type(
        self,
        build_type: str,
        variants: dict[str, T],
        blocking_reason: BlockingReasonFn[T] | None,
    ) -> _BuildTypeOutcome[T]:
        suffixes = self._variant_suffixes(build_type, variants)

        if len(variants) == 1:
            name, data = next(iter(variants.items()))
            return _BuildTypeOutcome(
                build_type=build_type,
                targets_by_suffix={suffixes[name]: data},
                variant_to_suffix={name: suffixes[name]},
                is_expanded=False,
                decision=SingleVariant(build_type=build_type, variant=name, suffix=suffixes[name]),
            )

        reason = blocking_reason(build_type, variants) if blocking_reason is not None else None
        if reason is not None:
            return self._expand(build_type, variants, suffixes, reason)

        if not self.all_equivalent(list(variants.values())):
            return self._expand(build_type, variants, suffixes, DIFFERING_CONFIGURATION)

        return self._compress_to_single_target(build_type, variants, suffixes)

    def _variant_suffixes(self, build_type: str, variants: dict[str, T]) -> dict[str, str]:
        suffixes = {name: self.normalize_suffix(name) for name in variants}
        claimed: dict[str, list[str]] = defaultdict(list)
        for name, suffix in suffixes.items():
            claimed[suffix].append(name)
        collisions = {suffix: names for suffix, names in claimed.items() if len(names) > 1}
        if collisions:
            raise SuffixCollisionError(
                "Distinct variant names normalize to the same target suffix.",
                hint="Rename the flavors or build types so their normalized names differ.",
                collisions=collisions,
                context={"build_type": build_type},
            )
        return suffixes

    def _expand(
        self,
        build_type: str,
        variants: dict[str, T],
        suffixes: dict[str, str],
        reason: str,
    ) -> _BuildTypeOutcome[T]:
        return _BuildTypeOutcome(
            build_type=build_type,
            targets_by_suffix={suffixes[name]: data for name, data in variants.items()},
            variant_to_suffix={name: suffixes[name] for name in variants},
            is_expanded=True,
            decision=Expanded(build_type=build_type, variants=tuple(variants), reason=reason),
        )

    def _compress_to_single_target(
        self,
        build_type: str,
        variants: dict[str, T],
        suffixes: dict[str, str],
    ) -> _BuildTypeOutcome[T]:
        suffix = self.normalize_suffix(build_type)
        representative = min(variants)
        data = variants[representative]
        compressed = self.copy_with_name(
            data, self._compressed_name(data, suffixes[representative], suffix)
        )
        return _BuildTypeOutcome(
            build_type=build_type,
            targets_by_suffix={suffix: compressed},
            variant_to_suffix={name: suffix for name in variants},
            is_expanded=False,
            decision=Compressed(build_type=build_type, variants=tuple(variants), suffix=suffix),
        )

    def _merge(self, outcomes: list[_BuildTypeOutcome[T]]) -> FlavorCompression[T]:
        targets_by_suffix: dict[str, T] = {}
        owners: dict[str, str] = {}
        variant_to_suffix: dict[str, str] = {}
        expanded: set[str] = set()
        for outcome in outcomes:
            for suffix, data in outcome.targets_by_suffix.items():
                if suffix in owners:
                    raise SuffixCollisionError(
                        "Two build types produce the same target suffix.",
                        hint="Build type and variant names must normalize to distinct suffixes.",
                        collisions={suffix: (owners[suffix], outcome.build_type)},
                        context={"operation": "merge_build_types"},
                    )
                owners[suffix] = outcome.build_type
                targets_by_suffix[suffix] = data
            variant_to_suffix.update(outcome.variant_to_suffix)
            if outcome.is_expanded:
                expanded.add(outcome.build_type)
        return FlavorCompression(
            targets_by_suffix=targets_by_suffix,
            variant_to_suffix=variant_to_suffix,
            expanded_build_types=frozenset(expanded),
            decisions=tuple(outcome.decision for outcome in outcomes),
        )

    def _try_full_compression(
        self,
        flavor_compressed: FlavorCompression[T],
        config: CrossBuildTypeConfig[T],
    ) -> FlavorCompression[T]:
        # Full compression is an optimization; every failed precondition
        # silently keeps the Phase 1 result.
        if flavor_compressed.expanded_build_types:
            return flavor_compressed
        if len(flavor_compressed.targets_by_suffix) <= 1:
            return flavor_compressed
        if config.dependency_check is not None and config.dependency_check() is not None:
            return flavor_compressed
        ordered = sorted(flavor_compressed.targets_by_suffix)
        if not config.equivalence_check([flavor_compressed.targets_by_suffix[s] for s in ordered]):
            return flavor_compressed

        representative_suffix = ordered[0]
        data = flavor_compressed.targets_by_suffix[representative_suffix]
        fully_compressed = self.copy_with_name(
            data, self._compressed_name(data, representative_suffix, "")
        )
        variant_names = tuple(sorted(flavor_compressed.variant_to_suffix))
        build_types = tuple(sorted({self.build_type_fn(name) for name in variant_names}))
        return FlavorCompression(
            targets_by_suffix={"": fully_compressed},
            variant_to_suffix={name: "" for name in variant_names},
            expanded_build_types=frozenset(),
            decisions=(FullyCompressed(build_types=build_types, variants=variant_names),),
        )

    def _compressed_name(self, data: T, from_suffix: str, to_suffix: str) -> str:
        if self.compress_name is not None:
            return self.compress_name(data, from_suffix, to_suffix)
        return self.name_of(data).removesuffix(from_suffix) + to_suffix


__all__ = [
    "BlockingReasonFn",
    "BuildTypeFn",
    "CrossBuildTypeConfig",
    "DIFFERING_CONFIGURATION",
    "FlavorCompression",
    "VariantCompressionEngine",
]
