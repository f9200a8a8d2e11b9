"""
Unit tests for the ResolutionError data model.

Tests equality, refinement and conversion to LSP diagnostics anchored to the
directive that caused the error.
"""

import pytest
from lsprotocol import types

from jbang_lsp.directive import DirectiveFacts
from jbang_lsp.resolution_error import DependencyResolutionError, ResolutionError


@pytest.mark.jbang
class TestResolutionErrorModel:
    """Test ResolutionError creation and equality."""

    def test_plain_error_equality(self) -> None:
        assert ResolutionError("boom") == ResolutionError("boom")

    def test_plain_error_is_immutable(self) -> None:
        error = ResolutionError("boom")

        with pytest.raises(AttributeError):
            error.message = "other"  # type: ignore[misc]

    def test_dependency_error_message(self) -> None:
        error = DependencyResolutionError.for_dependency("com.github.lalyos:jfiglet:6.6.6")

        assert error.message == "Could not resolve dependency com.github.lalyos:jfiglet:6.6.6"
        assert error.dependency == "com.github.lalyos:jfiglet:6.6.6"

    def test_dependency_error_differs_from_plain_error(self) -> None:
        plain = ResolutionError("Could not resolve dependency g:a:1")
        dependency = DependencyResolutionError.for_dependency("g:a:1")

        assert plain != dependency


@pytest.mark.jbang
class TestResolutionErrorDiagnostic:
    """Test conversion to LSP diagnostics."""

    def test_plain_error_is_unanchored(self) -> None:
        diagnostic = ResolutionError("Failed to execute JBang: boom").to_diagnostic()

        assert diagnostic.range.start == types.Position(line=0, character=0)
        assert diagnostic.message == "Failed to execute JBang: boom"
        assert diagnostic.severity == types.DiagnosticSeverity.Error
        assert diagnostic.source == "jbang"

    def test_dependency_error_anchored_to_deps_line(self) -> None:
        facts = DirectiveFacts(dependencies={"com.github.lalyos:jfiglet:6.6.6": 1})
        error = DependencyResolutionError.for_dependency("com.github.lalyos:jfiglet:6.6.6")

        diagnostic = error.to_diagnostic(facts)

        assert diagnostic.range.start.line == 1
        assert diagnostic.range.end.line == 2
        assert diagnostic.message == "Could not resolve dependency com.github.lalyos:jfiglet:6.6.6"

    def test_unknown_dependency_is_unanchored(self) -> None:
        facts = DirectiveFacts(dependencies={"g:a:1": 3})
        error = DependencyResolutionError.for_dependency("g:b:2")

        assert error.to_diagnostic(facts).range.start.line == 0

    def test_dependency_error_without_facts_is_unanchored(self) -> None:
        error = DependencyResolutionError.for_dependency("g:a:1")

        assert error.to_diagnostic().range.start.line == 0
