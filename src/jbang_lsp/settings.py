"""Settings for the JBang language server.

Settings are read from environment variables:

- JBANG_LSP_EXECUTABLE: path of the jbang executable
- JBANG_LSP_JAVA_HOME: Java home passed to jbang when JAVA_HOME is not set
- JBANG_LSP_HOME: base directory for local state (default ~/.jbang-lsp)
- JBANG_LSP_LOG_LEVEL: logging level name (default INFO)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_HOME = Path.home() / ".jbang-lsp"


def _non_blank(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value.strip()


@dataclass
class JBangSettings:
    """Configuration of the JBang language server.

    Attributes:
        jbang_executable: Explicit jbang executable, or None to look it up
        java_home: Java home override for the jbang process
        home_dir: Base directory for local state
        log_level: Logging level name
    """

    jbang_executable: str | None = None
    java_home: str | None = None
    home_dir: Path = field(default_factory=lambda: DEFAULT_HOME)
    log_level: str = "INFO"

    @property
    def state_dir(self) -> Path:
        """Directory holding persisted classpath containers."""
        return self.home_dir / "state"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> JBangSettings:
        env = os.environ if environ is None else environ
        home = _non_blank(env.get("JBANG_LSP_HOME"))
        return cls(
            jbang_executable=_non_blank(env.get("JBANG_LSP_EXECUTABLE")),
            java_home=_non_blank(env.get("JBANG_LSP_JAVA_HOME")),
            home_dir=Path(home).expanduser() if home else DEFAULT_HOME,
            log_level=(_non_blank(env.get("JBANG_LSP_LOG_LEVEL")) or "INFO").upper(),
        )
