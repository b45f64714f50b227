"""Variant suffix normalization and target naming."""

from __future__ import annotations

import re

_SEPARATORS = re.compile(r"[^A-Za-z0-9]+")
_CAMEL_TOKEN = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|[0-9]+")


def variant_tokens(variant_name: str) -> tuple[str, ...]:
    """Split a camel-cased variant name into lower-case tokens.

    ``freeDebugUnitTest`` -> ``("free", "debug", "unit", "test")``.
    """
    tokens: list[str] = []
    for chunk in _SEPARATORS.split(variant_name):
        tokens.extend(token.lower() for token in _CAMEL_TOKEN.findall(chunk))
    return tuple(tokens)


def normalize_variant_suffix(variant_name: str) -> str:
    """Return the hyphenated target suffix for *variant_name*.

    ``freeDebug`` -> ``-free-debug``; ``debug`` -> ``-debug``; an empty name
    yields the empty suffix.
    """
    tokens = variant_tokens(variant_name)
    if not tokens:
        return ""
    return "-" + "-".join(tokens)


def target_name(base_name: str, suffix: str) -> str:
    return f"{base_name}{suffix}"


def unit_test_target_name(project_name: str, suffix: str) -> str:
    return f"{project_name}{suffix}-test"


__all__ = [
    "normalize_variant_suffix",
    "target_name",
    "unit_test_target_name",
    "variant_tokens",
]
