"""Source Graph for JBang scripts.

This module provides the SourceGraphCollector class that computes the set of
source files transitively reachable from a script through //SOURCES
directives. Scripts may reference each other circularly.
"""

from __future__ import annotations

import logging
import os
from collections import deque
from collections.abc import Iterable

from jbang_lsp.directive import script_reference
from jbang_lsp.directive_scanner import DirectiveScanner

logger = logging.getLogger(__name__)


class SourceGraphCollector:
    """Collects the transitive closure of //SOURCES references.

    Every file is scanned at most once. The traversal keeps an explicit
    frontier instead of recursing, so long reference chains do not grow the
    call stack.
    """

    def __init__(self, scanner: DirectiveScanner | None = None) -> None:
        """Initialize the collector.

        Args:
            scanner: The scanner used to read each file's directives.
        """
        self._scanner = scanner or DirectiveScanner()

    def collect(
        self,
        initial_sources: Iterable[str | os.PathLike[str]],
        root: str | os.PathLike[str] | None = None,
    ) -> set[str]:
        """Compute all sources reachable from ``initial_sources``.

        Args:
            initial_sources: The sources declared by the root script.
            root: The root script itself. It is never part of the result, even
                  when a source references it back.

        Returns:
            The set of normalized absolute source paths, including the initial ones.
        """
        root_ref = script_reference(root) if root is not None else None

        result: set[str] = set()
        for source in initial_sources:
            source_ref = script_reference(source)
            if source_ref != root_ref:
                result.add(source_ref)

        scanned: set[str] = set()
        if root_ref is not None:
            scanned.add(root_ref)

        frontier: deque[str] = deque(result)
        while frontier:
            current = frontier.popleft()
            if current in scanned:
                continue
            scanned.add(current)

            for source in self._scanner.scan_file(current).sources:
                if source in result or source == root_ref:
                    continue
                logger.debug(f"Discovered source {source} referenced from {current}")
                result.add(source)
                frontier.append(source)

        return result

    def get_transitive_sources(self, script: str | os.PathLike[str]) -> set[str]:
        """Compute all sources reachable from a script file.

        Args:
            script: The root script.

        Returns:
            The set of sources transitively referenced by ``script``.
        """
        facts = self._scanner.scan_file(script)
        return self.collect(facts.sources, root=script)
