# src/colonysim_core/errors.py
import logging
from abc import abstractmethod
from typing import Any, Dict, Protocol
from typing import runtime_checkable

logger = logging.getLogger(__name__)

# --- User-Facing Exception Hierarchy ---

class ColonySimError(Exception):
    """Base class for all custom, user-facing errors in ColonySim Core."""
    pass

class ColonyConversionError(ColonySimError):
    """
    Raised when a raw colony snapshot cannot be turned into a Colony at all, e.g.
    because the snapshot itself is structurally invalid. Reference data gaps never
    raise this; they degrade to defaults instead.
    """
    pass


# --- Diagnostic Protocol & Base Exception ---

@runtime_checkable
class Diagnosable(Protocol):
    """
    A protocol for exceptions that can generate their own diagnostic report.
    """
    def get_diagnostic_report(self) -> str:
        """Generates a complete, user-friendly, multi-line report string."""
        ...

class DiagnosableError(Exception, Diagnosable):
    """
    A common, concrete base class for all internal exceptions that are diagnosable.

    It inherits from `Exception` so it can be used in `except` clauses, and declares
    `get_diagnostic_report` abstract so every subclass has to provide a report.
    """
    @abstractmethod
    def get_diagnostic_report(self) -> str:
        """
        Abstract method to generate the diagnostic report.
        Subclasses MUST implement this.
        """
        raise NotImplementedError


# --- Stateless Formatting Utility ---

def format_diagnostic_report(
    error_type: str,
    details: str,
    suggestion: str,
    context: Dict[str, Any]
) -> str:
    """
    A stateless helper to format the final multi-line report string, ensuring a
    consistent look and feel for all user-facing diagnostics.

    Args:
        error_type: The high-level category of the error (e.g., "Snapshot Schema Error").
        details: A detailed, potentially multi-line description of the problem.
        suggestion: Actionable advice for the user to resolve the issue.
        context: A dictionary of contextual information (colony id, source file,
                 resource id, query, ...).

    Returns:
        A formatted, user-friendly diagnostic report string ready for display.
    """
    lines = [
        "\n",
        "============== ColonySim Core: Actionable Diagnostic Report ==============",
        f"Error Type:     {error_type}",
    ]
    if colony_id := context.get('colony_id'):
        lines.append(f"Colony:         {colony_id}")
    if source_file := context.get('source_file'):
        lines.append(f"Source File:    {source_file}")
    if resource_id := context.get('resource_id'):
        lines.append(f"Resource:       {resource_id}")
    if query := context.get('query'):
        lines.append(f"Query:          {' '.join(str(query).split())}")

    lines.append("\nDetails:")
    for line in details.splitlines():
        lines.append(f"  {line}")

    if suggestion:
        lines.append("\nSuggestion:")
        for line in suggestion.splitlines():
            lines.append(f"  {line}")

    lines.append("==========================================================================")
    return "\n".join(lines)
