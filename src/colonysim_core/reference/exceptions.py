# src/colonysim_core/reference/exceptions.py
"""
Defines the diagnosable error raised by the reference data store.

The ReferenceCache and the ResourceChainResolver catch this error and fall back
to conservative values; it only escapes to callers who use the store directly.
"""
from dataclasses import dataclass

from ..errors import DiagnosableError, format_diagnostic_report


@dataclass(eq=False)
class ReferenceQueryError(DiagnosableError):
    """Raised when a query against the reference database fails."""
    details: str
    query: str = ""

    def __str__(self):
        return f"Reference data query failed: {self.details}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Reference Data Query Error",
            details=self.details,
            suggestion="Check that the reference database exists, is readable and contains the expected static data tables.",
            context={'query': self.query}
        )
