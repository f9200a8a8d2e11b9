"""Launch command for running the JBang language server as a subprocess.

IDE integrations spawn the server with the command returned by
``server_command``.
"""

from __future__ import annotations

import sys

SERVER_MODULE = "jbang_lsp"


def server_command() -> list[str]:
    """Return the command that starts the JBang language server on stdio.

    The server runs under the current interpreter, which must be able to
    import pygls and lsprotocol.

    Raises:
        RuntimeError: If the interpreter path is unknown or the LSP libraries are missing.
    """
    if not sys.executable:
        raise RuntimeError("Cannot start the JBang language server: the current interpreter path is unknown.")

    try:
        import lsprotocol  # noqa: F401
        import pygls  # noqa: F401
    except ImportError as e:
        raise RuntimeError(
            f"Cannot start the JBang language server, {e.name or e} is not installed. "
            "Install the jbang-lsp package with its dependencies (pygls, lsprotocol)."
        ) from e

    return [sys.executable, "-m", SERVER_MODULE]
