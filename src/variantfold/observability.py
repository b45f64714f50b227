"""Structured run log keyed by project, variant kind and build type."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from variantfold.models import VariantKind


@dataclass(slots=True)
class StructuredLogger:
    records: list[dict[str, Any]] = field(default_factory=list)

    def log(
        self,
        *,
        operation: str,
        project: str | None,
        variant_kind: VariantKind | None,
        build_type: str | None,
        message: str,
        level: str = "info",
        extra: dict[str, Any] | None = None,
    ) -> None:
        record: dict[str, Any] = {
            "level": level,
            "operation": operation,
            "project": project,
            "variant_kind": variant_kind,
            "build_type": build_type,
            "message": message,
        }
        if extra is not None:
            record["extra"] = extra
        self.records.append(record)

    def records_for_project(
        self, project: str, *, variant_kind: VariantKind | None = None
    ) -> list[dict[str, Any]]:
        """Records about *project*, optionally narrowed to one variant kind."""
        return [
            record
            for record in self.records
            if record.get("project") == project
            and (variant_kind is None or record.get("variant_kind") == variant_kind)
        ]

    def records_for_operation(self, operation: str) -> list[dict[str, Any]]:
        return [record for record in self.records if record.get("operation") == operation]

    def warnings(self) -> list[dict[str, Any]]:
        return [record for record in self.records if record.get("level") == "warning"]

    def to_json_lines(self, path: str | Path) -> Path:
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        lines = [json.dumps(record, sort_keys=True) for record in self.records]
        output_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return output_path
