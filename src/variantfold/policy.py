"""Run configuration for variant compression analysis."""

from __future__ import annotations

from dataclasses import dataclass

from variantfold.errors import ValidationError


@dataclass(frozen=True, slots=True)
class CompressionPolicy:
    library_cross_build_type: bool = True
    test_cross_build_type: bool = True
    check_dependency_blocking: bool = True
    analyze_tests: bool = True
    default_build_type: str = "debug"


def ensure_policy_valid(policy: CompressionPolicy) -> None:
    if not policy.default_build_type.strip():
        raise ValidationError(
            "A default build type is required.",
            hint="Set CompressionPolicy.default_build_type, e.g. 'debug'.",
            context={"operation": "analyze"},
        )


__all__ = ["CompressionPolicy", "ensure_policy_valid"]
