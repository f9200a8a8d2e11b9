"""Shared fixtures for the JBang tests."""

from __future__ import annotations

import os
import stat
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

from jbang_lsp.runtime import JBangRuntime

FAKE_JBANG = """#!/bin/sh
printf '%s\\n' "$@" > "{args_file}"
printf '%s\\n' "$JAVA_HOME" > "{env_file}"
cat "{output_file}"
exit {exit_code}
"""


@pytest.fixture
def write_script(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write a script file below tmp_path and return its path."""

    def _write(relative_path: str, content: str) -> Path:
        path = tmp_path / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def fake_jbang(tmp_path: Path) -> Callable[..., JBangRuntime]:
    """Create a fake jbang executable printing canned output."""
    if sys.platform == "win32":
        pytest.skip("fake jbang executables are POSIX shell scripts")

    def _create(output: str, exit_code: int = 0) -> JBangRuntime:
        bin_dir = tmp_path / "fake-jbang"
        bin_dir.mkdir(exist_ok=True)
        output_file = bin_dir / "output.txt"
        output_file.write_text(output, encoding="utf-8")
        executable = bin_dir / "jbang"
        executable.write_text(
            FAKE_JBANG.format(
                args_file=bin_dir / "args.txt",
                env_file=bin_dir / "java_home.txt",
                output_file=output_file,
                exit_code=exit_code,
            ),
            encoding="utf-8",
        )
        executable.chmod(executable.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return JBangRuntime(os.fspath(executable))

    return _create
