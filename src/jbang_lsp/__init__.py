"""JBang Language Server Package.

This package resolves the build information of JBang scripts by running
``jbang info tools`` and provides a pygls-based LSP server on top of it.
"""

__version__ = "0.1.0"

from jbang_lsp.directive import DirectiveFacts
from jbang_lsp.directive_scanner import DirectiveScanner
from jbang_lsp.execution import JBangExecution, ProgressMonitor
from jbang_lsp.execution_result import ExecutionResult
from jbang_lsp.resolution_error import DependencyResolutionError, ResolutionError
from jbang_lsp.source_graph import SourceGraphCollector

__all__ = [
    "DependencyResolutionError",
    "DirectiveFacts",
    "DirectiveScanner",
    "ExecutionResult",
    "JBangExecution",
    "ProgressMonitor",
    "ResolutionError",
    "SourceGraphCollector",
    "__version__",
]
