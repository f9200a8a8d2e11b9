"""
Unit tests for the JBang Source Graph.

Tests the SourceGraphCollector class computing the transitive closure of
//SOURCES references, including circular references.
"""

import os

import pytest

from jbang_lsp.directive_scanner import DirectiveScanner
from jbang_lsp.source_graph import SourceGraphCollector


class CountingScanner(DirectiveScanner):
    """Scanner recording how often each file is scanned."""

    def __init__(self) -> None:
        self.scanned: list[str] = []

    def scan_file(self, path):
        self.scanned.append(os.fspath(path))
        return super().scan_file(path)


@pytest.mark.jbang
class TestSourceGraphCollectorAcyclic:
    """Test closure computation on acyclic reference chains."""

    def test_no_sources_gives_empty_set(self, write_script) -> None:
        root = write_script("main.java", "class main {}\n")

        assert SourceGraphCollector().get_transitive_sources(root) == set()

    def test_collect_empty_initial_sources(self) -> None:
        assert SourceGraphCollector().collect([]) == set()

    def test_direct_sources(self, write_script) -> None:
        root = write_script("main.java", "//SOURCES a.java b.java\n")
        a = write_script("a.java", "class a {}\n")
        b = write_script("b.java", "class b {}\n")

        result = SourceGraphCollector().get_transitive_sources(root)

        assert result == {os.fspath(a), os.fspath(b)}

    def test_chain_is_followed(self, write_script) -> None:
        root = write_script("main.java", "//SOURCES a.java\n")
        a = write_script("a.java", "//SOURCES lib/b.java\n")
        b = write_script("lib/b.java", "//SOURCES c.java\n")
        c = write_script("lib/c.java", "class c {}\n")

        result = SourceGraphCollector().get_transitive_sources(root)

        assert result == {os.fspath(a), os.fspath(b), os.fspath(c)}

    def test_diamond_scans_shared_file_once(self, write_script) -> None:
        root = write_script("main.java", "//SOURCES a.java b.java\n")
        write_script("a.java", "//SOURCES shared.java\n")
        write_script("b.java", "//SOURCES shared.java\n")
        shared = write_script("shared.java", "class shared {}\n")
        scanner = CountingScanner()

        result = SourceGraphCollector(scanner).collect(scanner.scan_file(root).sources, root=root)

        assert os.fspath(shared) in result
        assert scanner.scanned.count(os.fspath(shared)) == 1

    def test_missing_source_is_kept_but_not_followed(self, write_script, tmp_path) -> None:
        root = write_script("main.java", "//SOURCES missing.java\n")

        result = SourceGraphCollector().get_transitive_sources(root)

        assert result == {os.fspath(tmp_path / "missing.java")}

    def test_long_chain_terminates(self, write_script) -> None:
        length = 1500
        root = write_script("main.java", "//SOURCES s0.java\n")
        for i in range(length):
            write_script(f"s{i}.java", f"//SOURCES s{i + 1}.java\n")

        result = SourceGraphCollector().get_transitive_sources(root)

        assert len(result) == length + 1


@pytest.mark.jbang
class TestSourceGraphCollectorCycles:
    """Test closure computation with circular references."""

    def test_mutual_reference(self, write_script) -> None:
        root = write_script("main.java", "//SOURCES a.java\n")
        a = write_script("a.java", "//SOURCES b.java\n")
        b = write_script("b.java", "//SOURCES a.java\n")
        scanner = CountingScanner()

        result = SourceGraphCollector(scanner).collect([a], root=root)

        assert result == {os.fspath(a), os.fspath(b)}
        assert scanner.scanned.count(os.fspath(a)) == 1
        assert scanner.scanned.count(os.fspath(b)) == 1

    def test_reference_back_to_root_excludes_root(self, write_script) -> None:
        root = write_script("main.java", "//SOURCES a.java\n")
        a = write_script("a.java", "//SOURCES main.java\n")

        result = SourceGraphCollector().get_transitive_sources(root)

        assert result == {os.fspath(a)}

    def test_self_reference(self, write_script) -> None:
        root = write_script("main.java", "//SOURCES a.java\n")
        a = write_script("a.java", "//SOURCES a.java\n")

        assert SourceGraphCollector().get_transitive_sources(root) == {os.fspath(a)}

    def test_equivalent_paths_collapse(self, write_script) -> None:
        root = write_script("main.java", "//SOURCES a.java ./a.java sub/../a.java\n")
        a = write_script("a.java", "class a {}\n")

        assert SourceGraphCollector().get_transitive_sources(root) == {os.fspath(a)}
