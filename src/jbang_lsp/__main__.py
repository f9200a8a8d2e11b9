"""Entry point for running the JBang LSP server as a module.

Usage:
    python -m jbang_lsp
"""

from jbang_lsp.server import main

if __name__ == "__main__":
    main()
