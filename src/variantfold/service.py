"""Per-run registry of compression results keyed by project path."""

from __future__ import annotations

from dataclasses import dataclass, field

from variantfold.naming import normalize_variant_suffix
from variantfold.result import LibraryCompressionResult, UnitTestCompressionResult


@dataclass(slots=True)
class VariantCompressionService:
    """Stores the latest library and unit-test results of every analyzed project.

    The two channels share the project-path key space but are never mixed.
    Results are written once per project, strictly in dependency order, and
    read by later dependents and by target generation.
    """

    _library_results: dict[str, LibraryCompressionResult] = field(default_factory=dict)
    _test_results: dict[str, UnitTestCompressionResult] = field(default_factory=dict)

    def register(self, project_path: str, result: LibraryCompressionResult) -> None:
        self._library_results[project_path] = result

    def get(self, project_path: str) -> LibraryCompressionResult | None:
        return self._library_results.get(project_path)

    def register_test_result(self, project_path: str, result: UnitTestCompressionResult) -> None:
        self._test_results[project_path] = result

    def get_test_result(self, project_path: str) -> UnitTestCompressionResult | None:
        return self._test_results.get(project_path)

    def has_result(self, project_path: str) -> bool:
        return project_path in self._library_results

    @property
    def project_paths(self) -> tuple[str, ...]:
        return tuple(self._library_results)

    def resolve_suffix(
        self,
        project_path: str,
        variant_name: str,
        *,
        build_type: str | None = None,
    ) -> str | None:
        """Return the target suffix a dependent should reference.

        The dependency's own mapping for *variant_name* wins. Otherwise a fully
        compressed dependency resolves to the empty suffix, and a dependency
        that compressed *build_type* resolves to that build type's suffix.
        ``None`` means no registered target can stand in for the variant.
        """
        result = self.get(project_path)
        if result is None:
            return None
        if variant_name in result.variant_to_suffix:
            return result.variant_to_suffix[variant_name]
        if result.is_fully_compressed:
            return ""
        if build_type is not None and not result.is_expanded(build_type):
            suffix = normalize_variant_suffix(build_type)
            if suffix in result.targets_by_suffix:
                return suffix
        return None

    def clear(self) -> None:
        self._library_results.clear()
        self._test_results.clear()


__all__ = ["VariantCompressionService"]
