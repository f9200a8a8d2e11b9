"""pygls-based language server for JBang scripts.

The server resolves opened and saved scripts with ``jbang info tools``,
publishes resolution errors as diagnostics, and keeps each project's
classpath container, persisted between sessions.
"""

from __future__ import annotations

import logging
import os
import sys
import threading
from typing import Any

from lsprotocol import types
from pygls.lsp.server import LanguageServer
from pygls.uris import to_fs_path

from jbang_lsp import __version__
from jbang_lsp.classpath import BUILD_FILE_NAME, ClasspathContainer, project_key_for
from jbang_lsp.container_store import ContainerStateError, ContainerStateStore
from jbang_lsp.directive_scanner import DirectiveScanner
from jbang_lsp.execution import JBangExecution, ProgressMonitor
from jbang_lsp.execution_result import ExecutionResult
from jbang_lsp.runtime import JBangRuntime
from jbang_lsp.settings import JBangSettings

log = logging.getLogger(__name__)

SERVER_NAME = "jbang-lsp"

# Custom request returning the classpath container of a document
CLASSPATH_REQUEST = "jbang/classpath"


class LoggingProgressMonitor(ProgressMonitor):
    """Progress monitor forwarding JBang progress labels to the log."""

    def set_task_name(self, name: str) -> None:
        super().set_task_name(name)
        log.info(f"JBang: {name}")


def _uri_from_params(params: Any) -> str | None:
    if isinstance(params, dict):
        uri = params.get("uri") or params.get("textDocument", {}).get("uri")
    elif isinstance(params, (list, tuple)) and params:
        uri = params[0]
    else:
        uri = getattr(params, "uri", None)
        if uri is None:
            uri = getattr(getattr(params, "text_document", None), "uri", None)
    return uri if isinstance(uri, str) else None


class JBangLanguageServer:
    """Language server resolving JBang scripts.

    Wraps a pygls LanguageServer (``self.lsp``); handler logic lives in plain
    methods so it can be driven without a client.
    """

    TARGET_EXTENSIONS = {".java", ".jsh", ".kt", ".groovy"}

    def __init__(self, settings: JBangSettings | None = None, store: ContainerStateStore | None = None) -> None:
        self.settings = settings or JBangSettings.from_env()
        self.lsp = LanguageServer(SERVER_NAME, __version__)
        self._store = store or ContainerStateStore(self.settings.state_dir)
        self._scanner = DirectiveScanner()
        self._runtime: JBangRuntime | None = None

        # Map from project key to its classpath container
        self._containers: dict[str, ClasspathContainer] = {}

        # Per-project locks serializing container state saves and loads
        self._project_locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

        self._setup_handlers()

    @property
    def runtime(self) -> JBangRuntime:
        if self._runtime is None:
            self._runtime = JBangRuntime.locate(self.settings.jbang_executable)
        return self._runtime

    def _setup_handlers(self) -> None:
        @self.lsp.feature(types.TEXT_DOCUMENT_DID_OPEN)
        @self.lsp.thread()
        def _did_open(ls: LanguageServer, params: types.DidOpenTextDocumentParams) -> None:
            self.did_open(params)

        @self.lsp.feature(types.TEXT_DOCUMENT_DID_SAVE)
        @self.lsp.thread()
        def _did_save(ls: LanguageServer, params: types.DidSaveTextDocumentParams) -> None:
            self.did_save(params)

        @self.lsp.feature(CLASSPATH_REQUEST)
        def _classpath(ls: LanguageServer, params: Any) -> dict[str, Any] | None:
            return self.classpath(params)

    def _is_target_file(self, path: str) -> bool:
        name = os.path.basename(path)
        if name == BUILD_FILE_NAME:
            return True
        return os.path.splitext(name)[1].lower() in self.TARGET_EXTENSIONS

    def _project_lock(self, project_key: str) -> threading.Lock:
        with self._locks_guard:
            if project_key not in self._project_locks:
                self._project_locks[project_key] = threading.Lock()
            return self._project_locks[project_key]

    def did_open(self, params: types.DidOpenTextDocumentParams) -> None:
        """Restore the saved classpath of an opened script, resolving it if none was saved."""
        uri = params.text_document.uri
        path = to_fs_path(uri)
        if path is None or not self._is_target_file(path):
            return

        if self.get_container(path) is None:
            self.resolve(uri, path)

    def did_save(self, params: types.DidSaveTextDocumentParams) -> None:
        uri = params.text_document.uri
        path = to_fs_path(uri)
        if path is None or not self._is_target_file(path):
            return
        self.resolve(uri, path)

    def get_container(self, path: str) -> ClasspathContainer | None:
        """Return the classpath container of a script's project.

        The in-memory container wins; otherwise the persisted state is
        restored. A corrupt state is logged and treated as missing.
        """
        project_key = project_key_for(path)
        with self._project_lock(project_key):
            container = self._containers.get(project_key)
            if container is not None:
                return container

            try:
                container = self._store.load(project_key)
            except ContainerStateError as e:
                log.warning(f"{e}: {e.__cause__}")
                return None

            if container is not None:
                log.info(f"Restored JBang classpath container for {project_key}")
                self._containers[project_key] = container
            return container

    def resolve(self, uri: str, path: str, monitor: ProgressMonitor | None = None) -> ExecutionResult:
        """Resolve a script with JBang, publish its diagnostics and persist its classpath.

        Args:
            uri: The document URI diagnostics are published for.
            path: The script path.
            monitor: Progress and cancellation of the execution.

        Returns:
            The execution result.
        """
        execution = JBangExecution(self.runtime, path, java_home=self.settings.java_home)
        result = execution.get_info(monitor or LoggingProgressMonitor())

        self._publish_diagnostics(uri, self.diagnostics_for(result))

        if result.is_success:
            container = ClasspathContainer.from_execution_result(result)
            project_key = project_key_for(path)
            with self._project_lock(project_key):
                self._containers[project_key] = container
                self._store.save(project_key, container)
            log.info(f"Resolved {len(container.libraries)} classpath entries for {project_key}")

        return result

    def diagnostics_for(self, result: ExecutionResult) -> list[types.Diagnostic]:
        """Convert resolution errors to diagnostics anchored to their directives."""
        if not result.errors:
            return []
        facts = self._scanner.scan_file(result.backing_resource)
        return [error.to_diagnostic(facts) for error in result.errors]

    def _publish_diagnostics(self, uri: str, diagnostics: list[types.Diagnostic]) -> None:
        self.lsp.text_document_publish_diagnostics(
            types.PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
        )

    def classpath(self, params: Any) -> dict[str, Any] | None:
        """Handle the jbang/classpath request."""
        uri = _uri_from_params(params)
        if uri is None:
            return None
        path = to_fs_path(uri)
        if path is None:
            return None
        container = self.get_container(path)
        return container.to_dict() if container is not None else None


def main() -> None:
    """Start the JBang language server on stdio."""
    settings = JBangSettings.from_env()
    # stdout carries the LSP protocol
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    server = JBangLanguageServer(settings)
    log.info(f"Starting {SERVER_NAME} {__version__}, state in {settings.state_dir}")
    server.lsp.start_io()
