"""Typed error model with stable, machine-readable error codes."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import StrEnum


class ErrorCode(StrEnum):
    """Stable error identifiers used across API surfaces."""

    VALIDATION = "E_VALIDATION"
    DEPENDENCY_CYCLE = "E_DEPENDENCY_CYCLE"
    SUFFIX_COLLISION = "E_SUFFIX_COLLISION"
    EXTRACTION = "E_EXTRACTION"
    INVARIANT = "E_INVARIANT"


class VariantFoldError(Exception):
    """Base error class that carries code, optional hint, and context."""

    code: str
    hint: str | None
    context: Mapping[str, str]

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code.value
        self.hint = hint
        self.context = dict(context or {})

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        if self.context:
            for k, v in self.context.items():
                if v:
                    parts.append(f"  {k}: {v}")
        parts.extend(self.detail_lines())
        return "\n".join(parts)

    def details(self) -> dict[str, object]:
        """Structured data beyond the flat string context, e.g. a cycle."""
        return {}

    def detail_lines(self) -> list[str]:
        return []

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code,
            "message": str(self),
            "context": dict(self.context),
        }
        if self.hint is not None:
            payload["hint"] = self.hint
        details = self.details()
        if details:
            payload["details"] = details
        return payload


class ValidationError(VariantFoldError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.VALIDATION, hint=hint, context=context)


class DependencyCycleError(VariantFoldError):
    """The project graph is not a DAG; ``cycle`` lists the offending paths."""

    cycle: tuple[str, ...]

    def __init__(
        self,
        message: str,
        *,
        cycle: tuple[str, ...],
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.DEPENDENCY_CYCLE, hint=hint, context=context)
        self.cycle = tuple(cycle)

    def details(self) -> dict[str, object]:
        return {"cycle": list(self.cycle)}

    def detail_lines(self) -> list[str]:
        return [f"  cycle: {' -> '.join(self.cycle)}"]


class SuffixCollisionError(VariantFoldError):
    """Several names claim one target suffix.

    ``collisions`` maps each contested suffix to the variant names or build
    types that normalize to it.
    """

    collisions: dict[str, tuple[str, ...]]

    def __init__(
        self,
        message: str,
        *,
        collisions: Mapping[str, Sequence[str]],
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.SUFFIX_COLLISION, hint=hint, context=context)
        self.collisions = {
            suffix: tuple(sorted(claimants)) for suffix, claimants in sorted(collisions.items())
        }

    def details(self) -> dict[str, object]:
        return {"collisions": {suffix: list(names) for suffix, names in self.collisions.items()}}

    def detail_lines(self) -> list[str]:
        return [
            f"  {suffix or '<empty>'} claimed by: {', '.join(names)}"
            for suffix, names in self.collisions.items()
        ]


class ExtractionError(VariantFoldError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.EXTRACTION, hint=hint, context=context)


class InvariantError(VariantFoldError):
    """Raised for engine logic defects. Never recovered from."""

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.INVARIANT, hint=hint, context=context)


__all__ = [
    "DependencyCycleError",
    "ErrorCode",
    "ExtractionError",
    "InvariantError",
    "SuffixCollisionError",
    "ValidationError",
    "VariantFoldError",
]
