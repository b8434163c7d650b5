"""Tests for the source pre-filter.

Acceptance criteria:
    - Modules without a helper name are never candidates
    - Modules under node_modules are never candidates
    - scan_directory lists candidate files in sorted order
    - Property-based: text without helper names never needs a transform
"""

from __future__ import annotations

from pathlib import Path

from hypothesis import given, settings
from hypothesis import strategies as st

from mock_macro.config import MacroConfig
from mock_macro.scanner import is_excluded, needs_transform, scan_directory

# ── TestNeedsTransform ────────────────────────────────


class TestNeedsTransform:
    """Substring pre-filter and dependency exclusion."""

    def test_import_helper(self, config: MacroConfig) -> None:
        assert needs_transform("mockNuxtImport('a', () => 1)", "/app/a.spec.ts", config)

    def test_component_helper(self, config: MacroConfig) -> None:
        assert needs_transform("mockComponent('A', {})", "/app/a.spec.ts", config)

    def test_plain_module(self, config: MacroConfig) -> None:
        assert not needs_transform("export const a = 1\n", "/app/a.ts", config)

    def test_node_modules_skipped(self, config: MacroConfig) -> None:
        code = "mockNuxtImport('a', () => 1)"
        assert not needs_transform(code, "/app/node_modules/pkg/index.js", config)

    def test_windows_node_modules(self, config: MacroConfig) -> None:
        assert is_excluded("C:\\app\\node_modules\\pkg\\index.js", config)

    def test_custom_helper_names(self) -> None:
        config = MacroConfig(import_helper="mockImport", component_helper="mockView")
        assert needs_transform("mockView('A', {})", "/a.ts", config)
        assert not needs_transform("mockNuxtImport('a', () => 1)", "/a.ts", config)


class TestNoOpProperty:
    """Text that never mentions a helper is always left alone."""

    @given(st.text())
    @settings(max_examples=200)
    def test_no_helper_no_transform(self, text: str) -> None:
        config = MacroConfig()
        if any(name in text for name in config.helper_names):
            return
        assert not needs_transform(text, "/app/a.spec.ts", config)


# ── TestScanDirectory ─────────────────────────────────


class TestScanDirectory:
    """scan_directory finds candidate modules."""

    def test_empty_directory(self, tmp_path: Path, config: MacroConfig) -> None:
        assert scan_directory(tmp_path, config) == []

    def test_finds_candidates(self, tmp_path: Path, config: MacroConfig) -> None:
        tests = tmp_path / "tests"
        tests.mkdir()
        (tests / "b.spec.ts").write_text("mockComponent('A', {})\n", encoding="utf-8")
        (tests / "a.spec.js").write_text("mockNuxtImport('a', () => 1)\n", encoding="utf-8")
        (tests / "plain.spec.ts").write_text("it('works', () => {})\n", encoding="utf-8")
        (tests / "notes.md").write_text("mockComponent in docs\n", encoding="utf-8")

        found = scan_directory(tmp_path, config)
        assert [p.name for p in found] == ["a.spec.js", "b.spec.ts"]

    def test_skips_node_modules(self, tmp_path: Path, config: MacroConfig) -> None:
        dep = tmp_path / "node_modules" / "pkg"
        dep.mkdir(parents=True)
        (dep / "index.js").write_text("mockNuxtImport('a', () => 1)\n", encoding="utf-8")
        assert scan_directory(tmp_path, config) == []

    def test_skips_undecodable(self, tmp_path: Path, config: MacroConfig) -> None:
        (tmp_path / "bin.js").write_bytes(b"\xff\xfe\x00mockComponent")
        assert scan_directory(tmp_path, config) == []
