"""Persistence of classpath containers between sessions.

Each project's container is stored as ``<state_dir>/<project>.container``,
a JSON document tagged with a format name and version so a damaged or
foreign file is detected on read.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from jbang_lsp.classpath import ClasspathContainer

log = logging.getLogger(__name__)

STATE_FORMAT = "jbang-classpath-container"
STATE_VERSION = 1
STATE_SUFFIX = ".container"


class ContainerStateError(Exception):
    """A persisted container exists but cannot be read."""


class ContainerStateStore:
    """Saves and restores classpath containers, one file per project.

    The store does no locking: saves and loads of the same project must be
    serialized by the caller.
    """

    def __init__(self, state_dir: str | os.PathLike[str]) -> None:
        self.state_dir = Path(state_dir)

    def state_file(self, project_name: str) -> Path:
        return self.state_dir / f"{project_name}{STATE_SUFFIX}"

    def save(self, project_name: str, container: ClasspathContainer) -> None:
        """Persist the container of a project, replacing any previous state.

        Failures are logged: a missing state only means the container is
        recomputed later.
        """
        state_file = self.state_file(project_name)
        document = {"format": STATE_FORMAT, "version": STATE_VERSION, "container": container.to_dict()}
        try:
            self.state_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{project_name}.", suffix=".tmp", dir=self.state_dir)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(document, handle, indent=2)
                os.replace(tmp_name, state_file)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            log.warning(f"Can't save JBang classpath container state for {project_name}: {e}")
            return
        log.debug(f"Saved JBang classpath container state for {project_name} to {state_file}")

    def load(self, project_name: str) -> ClasspathContainer | None:
        """Restore the container of a project.

        Returns:
            The container, or None when nothing was saved for the project.

        Raises:
            ContainerStateError: If the state file exists but cannot be read.
        """
        state_file = self.state_file(project_name)
        if not state_file.exists():
            return None

        try:
            document = json.loads(state_file.read_text(encoding="utf-8"))
            if not isinstance(document, dict) or document.get("format") != STATE_FORMAT:
                raise ValueError("not a JBang classpath container state file")
            if document.get("version") != STATE_VERSION:
                raise ValueError(f"unsupported state version {document.get('version')!r}")
            return ClasspathContainer.from_dict(document["container"])
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise ContainerStateError(f"Can't read JBang classpath container state for {project_name}") from e
