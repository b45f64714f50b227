"""Tests for the generic two-phase compression engine."""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, replace

import pytest

from variantfold.engine import (
    DIFFERING_CONFIGURATION,
    CrossBuildTypeConfig,
    VariantCompressionEngine,
)
from variantfold.errors import SuffixCollisionError
from variantfold.result import Compressed, Expanded, FullyCompressed, SingleVariant


@dataclass(frozen=True)
class Item:
    name: str
    payload: str = "same"
    marker: str = ""


def _same_payload(items: Sequence[Item]) -> bool:
    return len({item.payload for item in items}) <= 1


def _engine(build_type_of: Callable[[str], str]) -> VariantCompressionEngine[Item]:
    return VariantCompressionEngine(
        name_of=lambda item: item.name,
        copy_with_name=lambda item, name: replace(item, name=name),
        all_equivalent=_same_payload,
        build_type_fn=build_type_of,
    )


def _phase2(
    *,
    enabled: bool = True,
    dependency_check: Callable[[], str | None] | None = None,
) -> CrossBuildTypeConfig[Item]:
    return CrossBuildTypeConfig(
        enabled=enabled,
        equivalence_check=_same_payload,
        dependency_check=dependency_check,
    )


def _four_variants(release_payload: str = "same") -> dict[str, Item]:
    return {
        "freeDebug": Item("lib-free-debug"),
        "paidDebug": Item("lib-paid-debug"),
        "freeRelease": Item("lib-free-release", payload=release_payload),
        "paidRelease": Item("lib-paid-release", payload=release_payload),
    }


def _assert_referential_integrity(variant_to_suffix: Mapping[str, str], targets: Mapping) -> None:
    assert set(variant_to_suffix.values()) <= set(targets)


# ── Phase 1 ─────────────────────────────────────────────────────────


def test_empty_input_yields_empty_result(build_type_of: Callable[[str], str]) -> None:
    result = _engine(build_type_of).compress_without_blocking({}).to_result()
    assert result.suffixes == ()
    assert result.variant_to_suffix == {}
    assert result.expanded_build_types == frozenset()


def test_single_variant_passes_through_unchanged(build_type_of: Callable[[str], str]) -> None:
    item = Item("lib-free-debug")
    compression = _engine(build_type_of).compress_without_blocking(
        {"freeDebug": item}, cross_build_type=_phase2()
    )
    result = compression.to_result()

    assert result.suffixes == ("-free-debug",)
    assert result.data_for_suffix("-free-debug") is item
    assert not result.is_expanded("debug")
    assert compression.decisions == (
        SingleVariant(build_type="debug", variant="freeDebug", suffix="-free-debug"),
    )


def test_equivalent_flavors_compress_to_build_type_suffix(
    build_type_of: Callable[[str], str],
) -> None:
    variants = {"freeDebug": Item("lib-free-debug"), "paidDebug": Item("lib-paid-debug")}
    compression = _engine(build_type_of).compress_without_blocking(variants)
    result = compression.to_result()

    assert result.suffixes == ("-debug",)
    assert result.data_for_suffix("-debug").name == "lib-debug"
    assert dict(result.variant_to_suffix) == {"freeDebug": "-debug", "paidDebug": "-debug"}
    assert result.expanded_build_types == frozenset()
    assert compression.decisions == (
        Compressed(build_type="debug", variants=("freeDebug", "paidDebug"), suffix="-debug"),
    )


def test_differing_flavors_expand(build_type_of: Callable[[str], str]) -> None:
    variants = {
        "freeDebug": Item("lib-free-debug"),
        "paidDebug": Item("lib-paid-debug", payload="different"),
    }
    compression = _engine(build_type_of).compress_without_blocking(variants)
    result = compression.to_result()

    assert result.suffixes == ("-free-debug", "-paid-debug")
    assert result.expanded_build_types == frozenset({"debug"})
    assert result.data_for_suffix("-paid-debug").name == "lib-paid-debug"
    assert compression.decisions == (
        Expanded(
            build_type="debug",
            variants=("freeDebug", "paidDebug"),
            reason=DIFFERING_CONFIGURATION,
        ),
    )


def test_representative_is_alphabetically_first_variant(
    build_type_of: Callable[[str], str],
) -> None:
    variants = {
        "paidDebug": Item("lib-paid-debug", marker="paid"),
        "freeDebug": Item("lib-free-debug", marker="free"),
    }
    result = _engine(build_type_of).compress_without_blocking(variants).to_result()

    compressed = result.data_for_suffix("-debug")
    assert compressed.marker == "free"
    assert compressed.name == "lib-debug"


def test_blocking_reason_expands_an_otherwise_equivalent_group(
    build_type_of: Callable[[str], str],
) -> None:
    calls: list[tuple[str, tuple[str, ...]]] = []

    def blocking_reason(build_type: str, group: Mapping[str, Item]) -> str | None:
        calls.append((build_type, tuple(group)))
        return "blocked by dependencies: :core" if build_type == "debug" else None

    compression = _engine(build_type_of).compress_with_blocking(
        _four_variants(), blocking_reason=blocking_reason
    )
    result = compression.to_result()

    assert result.suffixes == ("-free-debug", "-paid-debug", "-release")
    assert result.expanded_build_types == frozenset({"debug"})
    assert calls == [
        ("debug", ("freeDebug", "paidDebug")),
        ("release", ("freeRelease", "paidRelease")),
    ]
    assert Expanded(
        build_type="debug",
        variants=("freeDebug", "paidDebug"),
        reason="blocked by dependencies: :core",
    ) in compression.decisions


def test_blocking_is_not_consulted_for_single_variant_groups(
    build_type_of: Callable[[str], str],
) -> None:
    def always_blocked(build_type: str, group: Mapping[str, Item]) -> str | None:
        return "blocked"

    result = (
        _engine(build_type_of)
        .compress_with_blocking({"freeDebug": Item("lib-free-debug")}, always_blocked)
        .to_result()
    )
    assert result.expanded_build_types == frozenset()


def test_results_do_not_depend_on_input_order(build_type_of: Callable[[str], str]) -> None:
    variants = _four_variants(release_payload="other")
    reversed_variants = dict(reversed(list(variants.items())))
    engine = _engine(build_type_of)

    first = engine.compress_without_blocking(variants, cross_build_type=_phase2())
    second = engine.compress_without_blocking(reversed_variants, cross_build_type=_phase2())

    assert dict(first.targets_by_suffix) == dict(second.targets_by_suffix)
    assert dict(first.variant_to_suffix) == dict(second.variant_to_suffix)
    assert first.decisions == second.decisions


# ── Phase 2 ─────────────────────────────────────────────────────────


def test_equivalent_build_types_fully_compress(build_type_of: Callable[[str], str]) -> None:
    compression = _engine(build_type_of).compress_without_blocking(
        _four_variants(), cross_build_type=_phase2()
    )
    result = compression.to_result()

    assert result.suffixes == ("",)
    assert result.is_fully_compressed
    assert result.data_for_suffix("").name == "lib"
    assert set(result.variant_to_suffix.values()) == {""}
    assert compression.decisions == (
        FullyCompressed(
            build_types=("debug", "release"),
            variants=("freeDebug", "freeRelease", "paidDebug", "paidRelease"),
        ),
    )


def test_differing_build_types_keep_build_type_targets(
    build_type_of: Callable[[str], str],
) -> None:
    result = (
        _engine(build_type_of)
        .compress_without_blocking(_four_variants("other"), cross_build_type=_phase2())
        .to_result()
    )

    assert result.suffixes == ("-debug", "-release")
    assert not result.is_fully_compressed
    assert result.expanded_build_types == frozenset()


def test_phase2_disabled_keeps_build_type_targets(build_type_of: Callable[[str], str]) -> None:
    result = (
        _engine(build_type_of)
        .compress_without_blocking(_four_variants(), cross_build_type=_phase2(enabled=False))
        .to_result()
    )
    assert result.suffixes == ("-debug", "-release")


def test_phase2_requires_clean_phase1(build_type_of: Callable[[str], str]) -> None:
    variants = _four_variants()
    variants["paidDebug"] = Item("lib-paid-debug", payload="different")
    always_equivalent: CrossBuildTypeConfig[Item] = CrossBuildTypeConfig(
        enabled=True, equivalence_check=lambda _items: True
    )

    result = (
        _engine(build_type_of)
        .compress_without_blocking(variants, cross_build_type=always_equivalent)
        .to_result()
    )

    assert not result.is_fully_compressed
    assert result.expanded_build_types == frozenset({"debug"})
    _assert_referential_integrity(result.variant_to_suffix, result.targets_by_suffix)


def test_phase2_dependency_check_blocks_silently(build_type_of: Callable[[str], str]) -> None:
    compression = _engine(build_type_of).compress_without_blocking(
        _four_variants(),
        cross_build_type=_phase2(dependency_check=lambda: "dependency :core not fully compressed"),
    )
    result = compression.to_result()

    assert result.suffixes == ("-debug", "-release")
    assert result.expanded_build_types == frozenset()
    assert all(isinstance(decision, Compressed) for decision in compression.decisions)


def test_phase2_single_build_type_is_left_alone(build_type_of: Callable[[str], str]) -> None:
    variants = {"freeDebug": Item("lib-free-debug"), "paidDebug": Item("lib-paid-debug")}
    result = (
        _engine(build_type_of)
        .compress_without_blocking(variants, cross_build_type=_phase2())
        .to_result()
    )
    assert result.suffixes == ("-debug",)
    assert not result.is_fully_compressed


def test_custom_compress_name_is_used_for_both_phases(
    build_type_of: Callable[[str], str],
) -> None:
    engine: VariantCompressionEngine[Item] = VariantCompressionEngine(
        name_of=lambda item: item.name,
        copy_with_name=lambda item, name: replace(item, name=name),
        all_equivalent=_same_payload,
        build_type_fn=build_type_of,
        compress_name=lambda _item, _from, to: f"app{to}-test",
    )
    phase1 = engine.compress_without_blocking(_four_variants("other")).to_result()
    phase2 = engine.compress_without_blocking(
        _four_variants(), cross_build_type=_phase2()
    ).to_result()

    assert [item.name for item in phase1.targets] == ["app-debug-test", "app-release-test"]
    assert phase2.data_for_suffix("").name == "app-test"


# ── Suffix collisions ───────────────────────────────────────────────


def test_colliding_variant_names_within_a_group_are_reported(
    build_type_of: Callable[[str], str],
) -> None:
    variants = {"freeDebug": Item("a"), "free_debug": Item("b")}
    with pytest.raises(SuffixCollisionError) as excinfo:
        _engine(build_type_of).compress_without_blocking(variants)
    assert excinfo.value.context["build_type"] == "debug"
    assert excinfo.value.collisions == {"-free-debug": ("freeDebug", "free_debug")}


def test_colliding_suffixes_across_build_types_are_reported() -> None:
    variants = {
        "freeDebug": Item("lib-free-debug"),
        "paidDebug": Item("lib-paid-debug"),
        "debug": Item("lib-debug"),
    }
    engine = _engine(lambda name: "other" if name == "debug" else "debug")
    with pytest.raises(SuffixCollisionError) as excinfo:
        engine.compress_without_blocking(variants)
    assert excinfo.value.collisions == {"-debug": ("debug", "other")}
