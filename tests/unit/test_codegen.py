"""Tests for mock statement rendering and the text splicer."""

from __future__ import annotations

import pytest

from mock_macro.codegen import (
    TextSplicer,
    generate,
    render_block,
    render_component_mock,
    render_facility_import,
    render_import_mock,
)
from mock_macro.config import MacroConfig
from mock_macro.matcher import MockComponentRequest, MockImportRequest
from mock_macro.models import ImportBinding
from mock_macro.planner import RewritePlan


def _import_req(name: str, factory: str, source: str = "#imports") -> MockImportRequest:
    return MockImportRequest(name, ImportBinding(name=name, from_=source), factory, (0, 0))


# ── TestRendering ─────────────────────────────────────


class TestRendering:
    """Generated statements match the vi.mock contract."""

    def test_import_mock(self) -> None:
        lines = render_import_mock("#imports", [
            _import_req("useFoo", "() => () => 'a'"),
            _import_req("useBar", "() => 2"),
        ])
        assert lines == [
            'vi.mock("#imports", async (importOriginal) => {',
            "  const mod = { ...await importOriginal() }",
            "  mod[\"useFoo\"] = await (() => () => 'a')()",
            '  mod["useBar"] = await (() => 2)()',
            "  return mod",
            "})",
        ]

    def test_component_mock(self) -> None:
        lines = render_component_mock(MockComponentRequest("/app/A.vue", "{ name: 'A' }", (0, 0)))
        assert lines == [
            'vi.mock("/app/A.vue", async () => {',
            "  const factory = ({ name: 'A' });",
            "  const result = typeof factory === 'function' ? await factory() : await factory",
            "  return 'default' in result ? result : { default: result }",
            "})",
        ]

    def test_symbol_override(self) -> None:
        lines = render_import_mock("m", [_import_req("a", "() => 1", "m")], symbol="vv")
        assert lines[0].startswith("vv.mock(")

    def test_strings_json_encoded(self) -> None:
        lines = render_component_mock(MockComponentRequest('C:\\x\\"é".vue', "{}", (0, 0)))
        assert lines[0] == 'vi.mock("C:\\\\x\\\\\\"é\\".vue", async () => {'

    def test_facility_import(self) -> None:
        assert render_facility_import("vi", "vitest") == 'import {vi} from "vitest";'


class TestRenderBlock:
    """The block orders import groups before components."""

    def test_noop_plan_empty(self) -> None:
        assert render_block(RewritePlan(), MacroConfig()) == ""

    def test_with_facility_import(self) -> None:
        plan = RewritePlan(
            import_groups={"#imports": [_import_req("useFoo", "() => 1")]},
            component_requests=[MockComponentRequest("/A.vue", "{}", (0, 0))],
        )
        block = render_block(plan, MacroConfig())
        assert block.startswith('\nimport {vi} from "vitest";\nvi.mock("#imports"')
        assert block.endswith("});\n")
        assert block.index('"#imports"') < block.index('"/A.vue"')

    def test_existing_facility_import(self) -> None:
        plan = RewritePlan(
            import_groups={"m": [_import_req("a", "() => 1", "m")]},
            needs_facility_import=False,
        )
        block = render_block(plan, MacroConfig())
        assert block.startswith('\nvi.mock("m"')
        assert "import {" not in block


# ── TestTextSplicer ───────────────────────────────────


class TestTextSplicer:
    """Positional edits against the original text."""

    def test_untouched(self) -> None:
        assert TextSplicer("abc").to_string() == "abc"

    def test_remove_keeps_rest_of_line(self) -> None:
        text = "a(); MACRO; b()"
        start = text.index("MACRO")
        out = TextSplicer(text).remove(start, start + 5).to_string()
        assert out == "a(); ; b()"

    def test_insert_order(self) -> None:
        out = TextSplicer("xy").insert(1, "1").insert(1, "2").to_string()
        assert out == "x12y"

    def test_insert_at_removal_edges(self) -> None:
        out = TextSplicer("abcdef").remove(2, 4).insert(2, "<").insert(4, ">").to_string()
        assert out == "ab<>ef"

    def test_overlap_rejected(self) -> None:
        splicer = TextSplicer("abcdef").remove(1, 4)
        with pytest.raises(ValueError, match="overlaps"):
            splicer.remove(3, 5)

    def test_insert_inside_removal_rejected(self) -> None:
        splicer = TextSplicer("abcdef").remove(1, 4)
        with pytest.raises(ValueError, match="inside"):
            splicer.insert(2, "x")

    def test_removal_around_insert_rejected(self) -> None:
        splicer = TextSplicer("abcdef").insert(2, "x")
        with pytest.raises(ValueError, match="contains"):
            splicer.remove(1, 4)

    def test_out_of_range(self) -> None:
        with pytest.raises(ValueError):
            TextSplicer("abc").remove(2, 9)

    def test_map_segments(self) -> None:
        text = "abc\ndef MACRO ghi\n"
        start = text.index("MACRO")
        splicer = TextSplicer(text).remove(start, start + 5).insert(0, "X\n")
        assert splicer.to_string() == "X\nabc\ndef  ghi\n"
        smap = splicer.generate_map(source="a.js", file="a.js")
        assert smap.sources == ["a.js"]
        assert smap.segments == [
            [],
            [(0, 0, 0, 0)],
            [(0, 0, 1, 0), (4, 0, 1, 9)],
            [],
        ]

    def test_map_columns_count_utf16_units(self) -> None:
        text = "const s = '😀'; MACRO; const k = 2"
        start = text.index("MACRO")
        splicer = TextSplicer(text).remove(start, start + 5)
        assert splicer.to_string() == "const s = '😀'; ; const k = 2"
        # the emoji is two code units in both the original and the output
        assert splicer.generate_map().segments == [[(0, 0, 0, 0), (16, 0, 0, 21)]]

    def test_map_sources_content(self) -> None:
        smap = TextSplicer("abc").generate_map(include_content=True)
        assert smap.sources_content == ["abc"]
        assert smap.sources == [""]


# ── TestGenerate ──────────────────────────────────────


class TestGenerate:
    """generate() applies a plan end to end."""

    def test_removes_calls_and_inserts_block(self) -> None:
        source = "mockNuxtImport('useFoo', () => 1)\nfoo()\n"
        end = source.index("\n")
        req = MockImportRequest("useFoo", ImportBinding(name="useFoo", from_="#imports"), "() => 1", (0, end))
        plan = RewritePlan(import_groups={"#imports": [req]}, removals=[(0, end)])
        result = generate(source, plan, "/a.js", MacroConfig())
        assert "mockNuxtImport" not in result.code
        assert result.code.endswith(";\n\nfoo()\n")
        assert result.map.file == "/a.js"
