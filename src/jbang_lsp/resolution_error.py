"""Resolution error data model for JBang executions.

This module provides the ResolutionError dataclass, reported when JBang fails
to produce build information for a script, and its DependencyResolutionError
refinement carrying the coordinate of the dependency that could not be
resolved.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lsprotocol import types

    from jbang_lsp.directive import DirectiveFacts

DIAGNOSTIC_SOURCE = "jbang"


@dataclass(frozen=True)
class ResolutionError:
    """Represents an error reported while resolving a script.

    Attributes:
        message: The human readable error message
    """

    message: str

    def line(self, facts: DirectiveFacts | None = None) -> int:
        """Return the 0-indexed line the error is anchored to (0 when unknown)."""
        return 0

    def to_diagnostic(self, facts: DirectiveFacts | None = None) -> types.Diagnostic:
        """Convert this error to an LSP Diagnostic.

        Args:
            facts: Directive facts of the script, used to anchor the diagnostic
                   to the directive that caused it.

        Returns:
            An LSP Diagnostic spanning the anchoring line.
        """
        from lsprotocol import types

        line = self.line(facts)
        return types.Diagnostic(
            range=types.Range(
                start=types.Position(line=line, character=0),
                end=types.Position(line=line + 1, character=0),
            ),
            message=self.message,
            severity=types.DiagnosticSeverity.Error,
            source=DIAGNOSTIC_SOURCE,
        )


@dataclass(frozen=True)
class DependencyResolutionError(ResolutionError):
    """A dependency that JBang could not resolve.

    Attributes:
        dependency: The dependency coordinate (e.g. "info.picocli:picocli:4.6.3")
    """

    dependency: str = ""

    @classmethod
    def for_dependency(cls, dependency: str) -> DependencyResolutionError:
        return cls(message=f"Could not resolve dependency {dependency}", dependency=dependency)

    def line(self, facts: DirectiveFacts | None = None) -> int:
        if facts is None:
            return 0
        line = facts.dependency_line(self.dependency)
        return line if line is not None else 0
