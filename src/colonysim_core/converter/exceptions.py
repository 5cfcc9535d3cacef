# src/colonysim_core/converter/exceptions.py
"""
Diagnosable exceptions raised while reading raw colony snapshots.

`SnapshotParsingError` covers file-level and syntax problems, `SnapshotSchemaError`
covers snapshots that load but do not have the planet-detail structure. Both derive
from `DiagnosableError` so callers can catch one type and print a report.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from ..errors import DiagnosableError, format_diagnostic_report


def _format_schema_errors(errors: Dict[str, Any], indent: str = "  - ") -> str:
    return "\n".join(f"{indent}Field '{field}': {messages}" for field, messages in sorted(errors.items(), key=lambda kv: str(kv[0])))


class BaseSnapshotError(DiagnosableError):
    """Local base class for all snapshot reading errors."""
    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Generic Snapshot Error",
            details=str(self),
            suggestion="Please check the content of the colony snapshot.",
            context={}
        )


@dataclass(eq=False)
class SnapshotParsingError(BaseSnapshotError):
    """The snapshot file is missing, unreadable, not valid JSON/YAML, or not a mapping."""
    details: str
    file_path: Optional[Path] = None

    def __str__(self):
        if self.file_path is None:
            return f"Snapshot parsing error: {self.details}"
        return f"Snapshot parsing error in file '{self.file_path}': {self.details}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Snapshot Parsing or File Error",
            details=self.details,
            suggestion="Ensure the file exists, is readable and holds one planet-detail mapping in JSON or YAML.",
            context={'source_file': self.file_path}
        )


@dataclass(eq=False)
class SnapshotSchemaError(BaseSnapshotError):
    """The snapshot loaded but does not match the planet-detail structure."""
    errors: Dict[str, Any]
    file_path: Optional[Path] = None

    def __str__(self):
        source = f" for file '{self.file_path}'" if self.file_path else ""
        return f"Snapshot schema validation failed{source}:\n" + _format_schema_errors(self.errors)

    def get_diagnostic_report(self) -> str:
        details = (
            "The snapshot does not conform to the planet-detail schema.\n"
            f"See details for {len(self.errors)} issue(s) below:\n\n{_format_schema_errors(self.errors)}"
        )
        return format_diagnostic_report(
            error_type="Snapshot Schema Validation Error",
            details=details,
            suggestion="Check that 'pins' is present, every pin has 'pin_id', 'type_id', 'latitude' and 'longitude', and pin and route ids are unique.",
            context={'source_file': self.file_path}
        )
