"""JBang execution for resolving script build information.

This module runs ``jbang --verbose info tools <script>`` and turns its output
into an ExecutionResult: resolution errors when JBang reports problems, the
JSON build information otherwise, enriched with the script's directives.
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from jbang_lsp.directive import script_reference
from jbang_lsp.directive_scanner import DirectiveScanner
from jbang_lsp.execution_result import ExecutionResult
from jbang_lsp.output_classifier import PROGRESS_MARKER, classify_line
from jbang_lsp.resolution_error import ResolutionError
from jbang_lsp.runtime import JBangRuntime, find_java_home
from jbang_lsp.source_graph import SourceGraphCollector

log = logging.getLogger(__name__)

NO_INFORMATION_MESSAGE = "Failed to get JBang information"


class ExecutionCanceledError(Exception):
    """Raised when a JBang execution is canceled through its ProgressMonitor."""


class ProgressMonitor:
    """Progress reporting and cancellation for a JBang execution.

    ``cancel`` may be called from any thread; the execution notices it before
    starting the process and before reading each output line.
    """

    def __init__(self) -> None:
        self.task_name = ""
        self._canceled = threading.Event()

    def set_task_name(self, name: str) -> None:
        self.task_name = name

    def cancel(self) -> None:
        self._canceled.set()

    def is_canceled(self) -> bool:
        return self._canceled.is_set()

    def check_canceled(self) -> None:
        if self.is_canceled():
            raise ExecutionCanceledError("Execution canceled")


def _path_separators() -> tuple[str, ...]:
    return tuple(sep for sep in (os.sep, os.altsep) if sep)


def build_environment(base_env: Mapping[str, str], java_home: str | None = None) -> dict[str, str]:
    """Build the environment of a jbang process.

    An existing JAVA_HOME is kept as is. Otherwise JAVA_HOME is set to
    ``java_home`` (or the home of the java found on the PATH) and its bin
    directory is appended to PATH.

    Args:
        base_env: The environment to start from. It is copied, never modified.
        java_home: Java home override.

    Returns:
        A new environment mapping.
    """
    env = dict(base_env)
    current = env.get("JAVA_HOME")
    if current and current.strip():
        return env

    home = java_home if java_home and java_home.strip() else find_java_home(env)
    if not home:
        return env

    env["JAVA_HOME"] = home
    java_bin = home + ("bin" if home.endswith(_path_separators()) else os.sep + "bin")
    path = env.get("PATH")
    env["PATH"] = f"{path}{os.pathsep}{java_bin}" if path else java_bin
    return env


def _payload_sources(payload: dict[str, Any], base_dir: str) -> set[str] | None:
    """Sources reported by JBang, or None when it reported none as a list of paths."""
    sources = payload.get("sources")
    if not isinstance(sources, list) or not all(isinstance(source, str) for source in sources):
        return None
    return {script_reference(source, base_dir) for source in sources}


def _payload_files(payload: dict[str, Any], base_dir: str) -> dict[str, str] | None:
    """Files reported by JBang, or None when it reported none as a link to path mapping."""
    files = payload.get("files")
    if not isinstance(files, dict) or not all(
        isinstance(link, str) and isinstance(source, str) for link, source in files.items()
    ):
        return None
    return {link: script_reference(source, base_dir) for link, source in files.items()}


@dataclass(frozen=True)
class AdditionalInfo:
    """Build information read from the script itself rather than from JBang."""

    java_version: str | None
    sources: set[str]
    files: dict[str, str]


class JBangExecution:
    """A single ``jbang info tools`` invocation for one script.

    Invocations share no state, each call to ``get_info`` returns a fresh
    ExecutionResult.
    """

    def __init__(
        self,
        runtime: JBangRuntime,
        file: str | os.PathLike[str],
        java_home: str | None = None,
        environ: Mapping[str, str] | None = None,
        scanner: DirectiveScanner | None = None,
    ) -> None:
        """Initialize the execution.

        Args:
            runtime: The jbang installation to run.
            file: The script to resolve.
            java_home: Java home used when the environment has no JAVA_HOME.
            environ: Base environment of the process. Defaults to os.environ.
        """
        self.runtime = runtime
        self.file = script_reference(file)
        self.java_home = java_home
        self._environ = environ
        self._scanner = scanner or DirectiveScanner()
        self._collector = SourceGraphCollector(self._scanner)

    def command(self) -> list[str]:
        return [self.runtime.executable, "--verbose", "info", "tools", self.file]

    def get_info(self, monitor: ProgressMonitor | None = None) -> ExecutionResult:
        """Run jbang and build the ExecutionResult.

        Args:
            monitor: Receives progress labels and carries cancellation.

        Returns:
            The result. Failures are reported in ``errors``, never raised.
        """
        monitor = monitor or ProgressMonitor()
        result = ExecutionResult(backing_resource=self.file)

        try:
            output = self._run(monitor, result.errors)
        except (OSError, subprocess.SubprocessError, ExecutionCanceledError) as e:
            log.warning(f"Failed to execute JBang for {self.file}: {e}")
            return ExecutionResult(
                backing_resource=self.file,
                errors=[ResolutionError(f"Failed to execute JBang: {e}")],
            )

        if not result.errors and not output:
            result.errors.append(ResolutionError(NO_INFORMATION_MESSAGE))
        if output and not output.startswith("{"):
            result.errors.append(ResolutionError(output))

        if result.errors:
            log.info(f"JBang reported {len(result.errors)} error(s) for {self.file}")
            return result

        try:
            payload = json.loads(output)
        except json.JSONDecodeError as e:
            result.errors.append(ResolutionError(f"Failed to parse JBang output: {e}"))
            return result
        if not isinstance(payload, dict):
            result.errors.append(ResolutionError(f"Failed to parse JBang output: {output}"))
            return result

        result.payload = payload
        requested = payload.get("requestedJavaVersion")
        if requested is not None:
            result.requested_java_version = str(requested)

        base_dir = os.path.dirname(self.file)
        result.sources = _payload_sources(payload, base_dir)
        result.files = _payload_files(payload, base_dir)

        if result.requested_java_version is None or result.sources is None or result.files is None:
            additional = self._collect_additional_info()
            if additional is not None:
                if result.requested_java_version is None:
                    result.requested_java_version = additional.java_version
                if result.sources is None:
                    result.sources = additional.sources
                if result.files is None:
                    result.files = additional.files

        return result

    def _run(self, monitor: ProgressMonitor, errors: list[ResolutionError]) -> str:
        """Start jbang and read its merged output until the stream closes.

        Error lines are appended to ``errors``; the payload lines are returned
        joined and trimmed.
        """
        monitor.check_canceled()
        command = self.command()
        env = build_environment(os.environ if self._environ is None else self._environ, self.java_home)
        log.info(f"Running {' '.join(command)}")

        output: list[str] = []
        with subprocess.Popen(
            command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            env=env,
            text=True,
            encoding="utf-8",
            errors="replace",
        ) as process:
            assert process.stdout is not None
            try:
                while True:
                    monitor.check_canceled()
                    raw_line = process.stdout.readline()
                    if not raw_line:
                        break
                    line = raw_line.rstrip("\r\n")
                    log.debug(f"jbang: {line}")

                    if line.startswith(PROGRESS_MARKER):
                        monitor.set_task_name(line)

                    classified = classify_line(line)
                    if classified.kind == "error" and classified.error is not None:
                        errors.append(classified.error)
                    elif classified.kind == "payload":
                        output.append(line)
            except BaseException:
                process.kill()
                raise

            # The exit code is not used: errors are detected from the output
            exit_code = process.wait()
            if exit_code != 0:
                log.debug(f"jbang exited with code {exit_code} for {self.file}")

        return "\n".join(output).strip()

    def _collect_additional_info(self) -> AdditionalInfo | None:
        """Read //JAVA, //SOURCES and //FILES from the script.

        Returns None when the script cannot be scanned.
        """
        try:
            facts = self._scanner.scan_file(self.file)
            sources = self._collector.collect(facts.sources, root=self.file) if facts.sources else set()
        except (OSError, ValueError) as e:
            log.debug(f"Could not collect additional information for {self.file}: {e}")
            return None
        return AdditionalInfo(java_version=facts.java_version, sources=sources, files=dict(facts.files))
