"""Core typed dataclasses for projects, variants and extracted variant data."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Literal, Protocol

VariantKind = Literal["library", "test"]
TestSize = Literal["small", "medium", "large", "enormous"]


@dataclass(frozen=True, slots=True)
class Project:
    """A node of the project dependency graph, identified by its path."""

    path: str
    is_library: bool = True

    @property
    def name(self) -> str:
        tail = self.path.rstrip(":").rsplit(":", 1)[-1]
        return tail or "root"


@dataclass(frozen=True, slots=True)
class MatchedVariant:
    variant_name: str
    build_type: str
    flavors: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ProjectDependency:
    """Reference to another project's generated target.

    ``suffix`` is the compressed suffix currently attached to the reference
    and may change as the dependency's own compression settles.
    """

    project_path: str
    suffix: str = ""

    def __str__(self) -> str:
        return f"{self.project_path}{self.suffix}"


@dataclass(frozen=True, slots=True)
class ExternalDependency:
    coordinate: str

    def __str__(self) -> str:
        return self.coordinate


Dependency = ProjectDependency | ExternalDependency


def sorted_pairs(
    values: Mapping[str, str] | Iterable[tuple[str, str]],
) -> tuple[tuple[str, str], ...]:
    return tuple(sorted(dict(values).items()))


@dataclass(frozen=True, slots=True)
class LintConfigData:
    enabled: bool = True
    lint_config: str | None = None
    baseline_path: str | None = None
    lint_checks: tuple[Dependency, ...] = ()


@dataclass(frozen=True, slots=True)
class LibraryVariantData:
    """Extracted build data of one library variant.

    ``res_values`` and ``build_config_fields`` are stored as key-sorted
    ``(name, value)`` pairs so the record stays hashable. A mapping is
    accepted and converted on construction.
    """

    name: str
    srcs: tuple[str, ...] = ()
    resource_sets: tuple[str, ...] = ()
    deps: tuple[Dependency, ...] = ()
    plugins: tuple[str, ...] = ()
    databinding: bool = False
    compose: bool = False
    res_values: tuple[tuple[str, str], ...] = ()
    build_config_fields: tuple[tuple[str, str], ...] = ()
    package_name: str | None = None
    manifest_file: str | None = None
    tags: tuple[str, ...] = ()
    lint_config: LintConfigData = field(default_factory=LintConfigData)

    def __post_init__(self) -> None:
        object.__setattr__(self, "res_values", sorted_pairs(self.res_values))
        object.__setattr__(self, "build_config_fields", sorted_pairs(self.build_config_fields))


@dataclass(frozen=True, slots=True)
class UnitTestVariantData:
    name: str
    srcs: tuple[str, ...] = ()
    additional_src_sets: tuple[str, ...] = ()
    deps: tuple[Dependency, ...] = ()
    tags: tuple[str, ...] = ()
    custom_package: str | None = None
    associates: tuple[str, ...] = ()
    resources: tuple[str, ...] = ()
    compose: bool = False
    test_size: TestSize = "medium"


class HasDependencies(Protocol):
    @property
    def deps(self) -> tuple[Dependency, ...]: ...


def project_dependency_paths(variants: Iterable[HasDependencies]) -> tuple[str, ...]:
    """Return the sorted, de-duplicated project paths referenced by *variants*."""
    paths = {
        dep.project_path
        for data in variants
        for dep in data.deps
        if isinstance(dep, ProjectDependency)
    }
    return tuple(sorted(paths))


__all__ = [
    "Dependency",
    "ExternalDependency",
    "HasDependencies",
    "LibraryVariantData",
    "LintConfigData",
    "MatchedVariant",
    "Project",
    "ProjectDependency",
    "TestSize",
    "UnitTestVariantData",
    "VariantKind",
    "project_dependency_paths",
    "sorted_pairs",
]
