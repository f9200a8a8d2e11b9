"""Classpath container model for JBang scripts.

A classpath container is the set of classpath entries an IDE compiles a
script against. It is derived from a successful ExecutionResult.
"""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass, field
from typing import Any, Literal

from jbang_lsp.execution_result import ExecutionResult

JBANG_CLASSPATH_CONTAINER_ID = "dev.jbang.JBANG_CLASSPATH_CONTAINER"
JBANG_CLASSPATH_CONTAINER_DESCRIPTION = "JBang Dependencies"
BUILD_FILE_NAME = "build.jbang"

EntryKind = Literal["library", "source"]


def project_name_for(script: str | os.PathLike[str]) -> str:
    """Return the project name of a script.

    A ``build.jbang`` file names its project after its folder, any other
    script after its file name.
    """
    path = os.path.normpath(os.path.abspath(os.fspath(script)))
    name = os.path.basename(path)
    if name == BUILD_FILE_NAME:
        return os.path.basename(os.path.dirname(path)) or name
    return name


def project_key_for(script: str | os.PathLike[str]) -> str:
    """Return the key identifying the project of a script in persisted state.

    Scripts sharing a file name in different folders get different keys: the
    project name is suffixed with a hash of the script path (or of the folder,
    for a ``build.jbang`` file).
    """
    path = os.path.normpath(os.path.abspath(os.fspath(script)))
    identity = os.path.dirname(path) if os.path.basename(path) == BUILD_FILE_NAME else path
    digest = hashlib.sha1(identity.encode("utf-8")).hexdigest()[:8]
    return f"{project_name_for(path)}-{digest}"


@dataclass(frozen=True)
class ClasspathEntry:
    """Represents a single classpath entry.

    Attributes:
        path: Absolute path of the jar, directory or source file
        kind: "library" for resolved dependencies, "source" for script sources
    """

    path: str
    kind: EntryKind = "library"

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "kind": self.kind}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ClasspathEntry:
        if not isinstance(data, dict):
            raise ValueError(f"Classpath entry must be an object, got {type(data).__name__}")
        kind = data["kind"]
        if kind not in ("library", "source"):
            raise ValueError(f"Unknown classpath entry kind: {kind!r}")
        return cls(path=str(data["path"]), kind=kind)


@dataclass(frozen=True)
class ClasspathContainer:
    """The classpath of a JBang script.

    Attributes:
        entries: Classpath entries, in classpath order
        java_version: Requested Java version, if any
        container_id: Identifier of the container
        description: Human readable description
    """

    entries: tuple[ClasspathEntry, ...] = ()
    java_version: str | None = None
    container_id: str = JBANG_CLASSPATH_CONTAINER_ID
    description: str = JBANG_CLASSPATH_CONTAINER_DESCRIPTION

    @classmethod
    def from_execution_result(cls, result: ExecutionResult) -> ClasspathContainer:
        """Build the container of a successful execution.

        Raises:
            ValueError: If the execution reported errors.
        """
        if not result.is_success:
            raise ValueError(f"Cannot build a classpath container from a failed execution of {result.backing_resource}")

        entries = [ClasspathEntry(path) for path in result.resolved_dependencies]
        entries.extend(ClasspathEntry(source, "source") for source in sorted(result.sources or ()))
        return cls(entries=tuple(entries), java_version=result.requested_java_version)

    @property
    def libraries(self) -> list[str]:
        return [entry.path for entry in self.entries if entry.kind == "library"]

    def to_dict(self) -> dict[str, Any]:
        return {
            "containerId": self.container_id,
            "description": self.description,
            "javaVersion": self.java_version,
            "entries": [entry.to_dict() for entry in self.entries],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ClasspathContainer:
        if not isinstance(data, dict):
            raise ValueError(f"Classpath container must be an object, got {type(data).__name__}")
        if not isinstance(data["entries"], list):
            raise ValueError("Classpath container entries must be a list")
        java_version = data.get("javaVersion")
        return cls(
            entries=tuple(ClasspathEntry.from_dict(entry) for entry in data["entries"]),
            java_version=str(java_version) if java_version is not None else None,
            container_id=str(data["containerId"]),
            description=str(data["description"]),
        )
