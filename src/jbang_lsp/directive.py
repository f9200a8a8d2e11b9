"""Directive data model for JBang script files.

This module provides the DirectiveFacts dataclass that holds what a JBang
script declares in its leading directive block (//JAVA, //SOURCES, //FILES,
//DEPS), and the helper used to turn paths into script references.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field


def script_reference(path: str | os.PathLike[str], base_dir: str | os.PathLike[str] | None = None) -> str:
    """Return the identity of a script file: its normalized absolute path.

    Args:
        path: Absolute path, or a path relative to ``base_dir``.
        base_dir: Directory relative paths are resolved against. Defaults to the
                  current working directory.

    Returns:
        The normalized absolute path as a string.
    """
    raw = os.fspath(path)
    if base_dir is not None and not os.path.isabs(raw):
        raw = os.path.join(os.fspath(base_dir), raw)
    return os.path.normpath(os.path.abspath(raw))


@dataclass(frozen=True)
class DirectiveFacts:
    """Facts extracted from the directive block of a single file.

    Instances are produced fresh on every scan and never mutated.

    Attributes:
        java_version: Requested Java version (e.g. "11"), or None
        sources: Additional source paths, absolute, in declaration order
        files: Mapping from link name to absolute source path
        dependencies: Mapping from dependency coordinate to the 0-indexed line
                      of the //DEPS directive declaring it
    """

    java_version: str | None = None
    sources: tuple[str, ...] = ()
    files: dict[str, str] = field(default_factory=dict)
    dependencies: dict[str, int] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return self.java_version is None and not self.sources and not self.files and not self.dependencies

    def dependency_line(self, coordinate: str) -> int | None:
        """Line of the //DEPS directive declaring ``coordinate``, if any."""
        return self.dependencies.get(coordinate)
