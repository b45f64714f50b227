import pytest

from variantfold.errors import ErrorCode, InvariantError
from variantfold.result import CompressionResult


def test_empty_result_has_no_targets() -> None:
    result: CompressionResult[str] = CompressionResult.empty()
    assert result.suffixes == ()
    assert result.targets == ()
    assert result.expanded_build_types == frozenset()
    assert not result.is_fully_compressed


def test_dangling_variant_suffix_is_an_invariant_violation() -> None:
    with pytest.raises(InvariantError) as excinfo:
        CompressionResult(
            targets_by_suffix={"-debug": "lib-debug"},
            variant_to_suffix={"freeDebug": "-debug", "freeRelease": "-release"},
        )
    assert excinfo.value.code == ErrorCode.INVARIANT.value
    assert "freeRelease" in str(excinfo.value)


def test_fully_compressed_requires_single_empty_suffix() -> None:
    full = CompressionResult(
        targets_by_suffix={"": "lib"},
        variant_to_suffix={"freeDebug": "", "paidRelease": ""},
    )
    single_build_type = CompressionResult(
        targets_by_suffix={"-debug": "lib-debug"},
        variant_to_suffix={"freeDebug": "-debug"},
    )
    assert full.is_fully_compressed
    assert not single_build_type.is_fully_compressed


def test_accessors_and_expanded_lookup() -> None:
    result = CompressionResult(
        targets_by_suffix={"-release": "lib-release", "-free-debug": "a", "-paid-debug": "b"},
        variant_to_suffix={
            "freeDebug": "-free-debug",
            "paidDebug": "-paid-debug",
            "freeRelease": "-release",
            "paidRelease": "-release",
        },
        expanded_build_types=frozenset({"debug"}),
    )

    assert result.suffixes == ("-free-debug", "-paid-debug", "-release")
    assert result.targets == ("a", "b", "lib-release")
    assert result.suffix_for_variant("paidRelease") == "-release"
    assert result.data_for_suffix("-paid-debug") == "b"
    assert result.is_expanded("debug")
    assert not result.is_expanded("release")
    with pytest.raises(KeyError):
        result.suffix_for_variant("unknown")


def test_result_mappings_are_read_only_snapshots() -> None:
    targets = {"-debug": "lib-debug"}
    result = CompressionResult(targets_by_suffix=targets, variant_to_suffix={"freeDebug": "-debug"})
    targets["-release"] = "lib-release"

    assert result.suffixes == ("-debug",)
    with pytest.raises(TypeError):
        result.targets_by_suffix["-other"] = "x"  # type: ignore[index]
