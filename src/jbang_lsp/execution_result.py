"""Execution result model for `jbang info tools` invocations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from jbang_lsp.resolution_error import ResolutionError


@dataclass
class ExecutionResult:
    """The outcome of resolving one script with JBang.

    An empty ``errors`` list means success. On failure only ``errors`` is
    populated. ``sources`` and ``files`` are None until computed, which is not
    the same as empty.

    Attributes:
        backing_resource: Path of the script the result was computed for
        errors: Resolution errors, in the order they were reported
        payload: The JSON object printed by JBang (present only on success)
        requested_java_version: Requested Java version, from JBang or //JAVA
        sources: Transitive closure of //SOURCES references
        files: Mapping from link name to source path, from //FILES
    """

    backing_resource: str
    errors: list[ResolutionError] = field(default_factory=list)
    payload: dict[str, Any] | None = None
    requested_java_version: str | None = None
    sources: set[str] | None = None
    files: dict[str, str] | None = None

    @property
    def is_success(self) -> bool:
        return not self.errors

    @property
    def resolved_dependencies(self) -> list[str]:
        """Classpath entries resolved by JBang."""
        if not self.payload:
            return []
        return [str(entry) for entry in self.payload.get("resolvedDependencies") or []]

    @property
    def java_version(self) -> str | None:
        """Java version JBang would run the script with."""
        if not self.payload:
            return None
        version = self.payload.get("javaVersion")
        return str(version) if version is not None else None
