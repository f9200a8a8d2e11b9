"""Line classification for `jbang --verbose info tools` output.

JBang interleaves its log lines (prefixed with ``[jbang]``), progress lines,
error lines and the JSON document on a single stream. Each line is run through
an ordered list of classifiers; the first that recognizes the line wins and
anything left over is part of the JSON payload.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

from jbang_lsp.resolution_error import DependencyResolutionError, ResolutionError

PROGRESS_MARKER = "Resolving"
ERROR_MARKER = "[ERROR]"
LOG_PREFIX = "[jbang]"
DONE_MARKER = "Done"

# [ERROR] Could not resolve dependency info.picocli:picocli:4.4965.0
RESOLUTION_ERROR = re.compile(r"\[ERROR\] Could not resolve dependency (.*)")

# Older JBang versions: [jbang] Resolving eu.hansolo:tilesfx:1.3.4...[jbang] [ERROR] Could not resolve dependency
RESOLUTION_ERROR_OLD = re.compile(r"Resolving (.*)\.\.\.\[ERROR\] Could not resolve dependency")

LineKind = Literal["progress", "error", "noise", "payload"]


@dataclass(frozen=True)
class ClassifiedLine:
    """A line of JBang output and what it was recognized as.

    Attributes:
        kind: The classification tag
        text: The original line
        error: The resolution error, for "error" lines
    """

    kind: LineKind
    text: str
    error: ResolutionError | None = None


def sanitize_error(line: str) -> ResolutionError:
    """Convert an error line to a ResolutionError.

    The ``[jbang] `` log prefixes are stripped. Dependency errors, in the
    current or the legacy format, become DependencyResolutionError.
    """
    error = line.replace(LOG_PREFIX + " ", "")

    dependency: str | None = None
    for pattern in (RESOLUTION_ERROR, RESOLUTION_ERROR_OLD):
        match = pattern.search(error)
        if match and match.group(1).strip():
            dependency = match.group(1).strip()
            break

    if dependency:
        return DependencyResolutionError.for_dependency(dependency)
    return ResolutionError(error.strip())


def classify_error(line: str) -> ClassifiedLine | None:
    if ERROR_MARKER in line:
        return ClassifiedLine("error", line, sanitize_error(line))
    return None


def classify_progress(line: str) -> ClassifiedLine | None:
    if line.startswith(PROGRESS_MARKER):
        return ClassifiedLine("progress", line)
    return None


def classify_noise(line: str) -> ClassifiedLine | None:
    if line.startswith(LOG_PREFIX) or line.startswith(DONE_MARKER):
        return ClassifiedLine("noise", line)
    return None


# Errors come first: legacy dependency errors start with the progress marker
LINE_CLASSIFIERS: tuple[Callable[[str], ClassifiedLine | None], ...] = (
    classify_error,
    classify_progress,
    classify_noise,
)


def classify_line(line: str) -> ClassifiedLine:
    """Classify one line of JBang output (without its line terminator)."""
    for classifier in LINE_CLASSIFIERS:
        classified = classifier(line)
        if classified is not None:
            return classified
    return ClassifiedLine("payload", line)
