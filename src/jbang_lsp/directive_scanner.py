"""Directive Scanner for JBang script files.

This module provides the DirectiveScanner class for extracting the leading
directive block of a JBang script (//JAVA, //SOURCES, //FILES, //DEPS) and
resolving the paths it declares relative to the script's directory.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable

from jbang_lsp.directive import DirectiveFacts, script_reference

log = logging.getLogger(__name__)

# Any JBang directive: //NAME followed by whitespace or end of line, or the launcher line
# Note: directive names are upper case, //Q:CONFIG style names are allowed
DIRECTIVE_PATTERN = re.compile(r"^(?://[A-Z][A-Z0-9_:]*(?:\s|$)|///?usr/bin/env\s+jbang\b|#!)")

# //JAVA 17 or //JAVA 17+ (but not //JAVA_OPTIONS)
JAVA_PATTERN = re.compile(r"^//JAVA\s+(\d+)\+?\s*$")

SOURCES_PATTERN = re.compile(r"^//SOURCES\s+(.+)$")

FILES_PATTERN = re.compile(r"^//FILES\s+(.+)$")

DEPS_PATTERN = re.compile(r"^//DEPS\s+(.+)$")


def is_directive(line: str) -> bool:
    """Check whether a line is a JBang directive."""
    return DIRECTIVE_PATTERN.match(line) is not None


def is_blank(line: str) -> bool:
    return not line.strip()


def get_java_version(line: str) -> str | None:
    match = JAVA_PATTERN.match(line.rstrip())
    return match.group(1) if match else None


def get_sources(line: str) -> list[str]:
    match = SOURCES_PATTERN.match(line.rstrip())
    return match.group(1).split() if match else []


def get_files(line: str) -> list[tuple[str, str]]:
    """Extract (link, source) pairs from a //FILES directive.

    A bare entry (no ``=``) links the entry to itself.
    """
    match = FILES_PATTERN.match(line.rstrip())
    if not match:
        return []

    pairs: list[tuple[str, str]] = []
    for entry in match.group(1).split():
        link, sep, source = entry.partition("=")
        if not sep:
            source = link
        if link and source:
            pairs.append((link, source))
    return pairs


def get_dependencies(line: str) -> list[str]:
    match = DEPS_PATTERN.match(line.rstrip())
    return match.group(1).split() if match else []


class DirectiveScanner:
    """Scanner for the leading directive block of JBang scripts.

    Scanning stops at the first line that is neither blank nor a directive.
    Each directive line feeds at most one extractor.
    """

    def scan_lines(self, lines: Iterable[str], base_dir: str | os.PathLike[str]) -> DirectiveFacts:
        """Extract directive facts from the lines of a file.

        Args:
            lines: The file's lines, in order (trailing newlines are allowed).
            base_dir: Directory relative source paths are resolved against.

        Returns:
            The DirectiveFacts of the directive block.
        """
        java_version: str | None = None
        sources: list[str] = []
        files: dict[str, str] = {}
        dependencies: dict[str, int] = {}

        for line_number, raw_line in enumerate(lines):
            line = raw_line.rstrip("\r\n")
            if is_blank(line):
                continue
            if not is_directive(line):
                break

            version = get_java_version(line)
            if version is not None:
                if java_version is None:
                    java_version = version
                continue

            declared_sources = get_sources(line)
            if declared_sources:
                sources.extend(script_reference(source, base_dir) for source in declared_sources)
                continue

            declared_files = get_files(line)
            if declared_files:
                for link, source in declared_files:
                    files[link] = script_reference(source, base_dir)
                continue

            for coordinate in get_dependencies(line):
                dependencies.setdefault(coordinate, line_number)

        return DirectiveFacts(
            java_version=java_version,
            sources=tuple(sources),
            files=files,
            dependencies=dependencies,
        )

    def scan_file(self, path: str | os.PathLike[str]) -> DirectiveFacts:
        """Extract directive facts from a file on disk.

        An unreadable file yields empty facts.

        Args:
            path: Path of the file to scan.

        Returns:
            The DirectiveFacts of the file's directive block.
        """
        file_path = script_reference(path)
        try:
            with open(file_path, encoding="utf-8-sig") as handle:
                return self.scan_lines(handle, os.path.dirname(file_path))
        except (OSError, UnicodeDecodeError) as e:
            log.debug(f"Could not scan directives of {file_path}: {e}")
            return DirectiveFacts()
