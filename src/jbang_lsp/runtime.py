"""Location of the jbang executable."""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

log = logging.getLogger(__name__)

JBANG_NAME = "jbang"


@dataclass(frozen=True)
class JBangRuntime:
    """A jbang installation.

    Attributes:
        executable: Path (or bare command name) of the jbang executable
    """

    executable: str

    @classmethod
    def locate(cls, configured: str | None = None, environ: Mapping[str, str] | None = None) -> JBangRuntime:
        """Find the jbang executable to use.

        Lookup order: the configured path, $JBANG_HOME/bin/jbang, jbang on the
        PATH, ~/.jbang/bin/jbang. Falls back to the bare command name, so a
        missing installation surfaces as an execution failure.
        """
        env = os.environ if environ is None else environ
        if configured:
            return cls(configured)

        candidates: list[Path] = []
        jbang_home = env.get("JBANG_HOME")
        if jbang_home:
            candidates.append(Path(jbang_home) / "bin" / JBANG_NAME)

        on_path = shutil.which(JBANG_NAME, path=env.get("PATH"))
        if on_path:
            candidates.append(Path(on_path))

        candidates.append(Path.home() / ".jbang" / "bin" / JBANG_NAME)

        for candidate in candidates:
            if candidate.is_file() and os.access(candidate, os.X_OK):
                log.debug(f"Using jbang executable {candidate}")
                return cls(str(candidate))

        log.warning("No jbang executable found, relying on the PATH of the jbang process")
        return cls(JBANG_NAME)


def find_java_home(environ: Mapping[str, str] | None = None) -> str | None:
    """Derive a Java home from the java executable on the PATH."""
    env = os.environ if environ is None else environ
    java = shutil.which("java", path=env.get("PATH"))
    if not java:
        return None
    # <home>/bin/java, following alternatives-style symlinks
    return str(Path(java).resolve().parent.parent)
