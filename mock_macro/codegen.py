"""Code generation and map-preserving text splicing.

Generated statements target the Vitest mocking facility: ``vi.mock(id,
asyncFactory)`` with ``importOriginal()`` available inside the factory.
User factories are spliced in verbatim; they are never parsed here.

Macro calls are removed by replacing exactly their character range with
nothing, so other code sharing a line keeps its column.  The generated
block goes in at one offset: right after the existing facility import, or
at the start of the module.
"""

from __future__ import annotations

import bisect
import json
import logging
from dataclasses import dataclass

from mock_macro.config import MacroConfig
from mock_macro.matcher import MockComponentRequest, MockImportRequest
from mock_macro.planner import RewritePlan
from mock_macro.sourcemap import Segment, SourceMap, encode_mappings, utf16_len

log = logging.getLogger(__name__)

__all__ = [
    "TextSplicer",
    "TransformResult",
    "generate",
    "render_block",
    "render_component_mock",
    "render_facility_import",
    "render_import_mock",
]


@dataclass(frozen=True, slots=True)
class TransformResult:
    """Rewritten module text and its source map."""
    code: str
    map: SourceMap


# ── Rendering ────────────────────────────────────────


def _js_string(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def render_facility_import(symbol: str, module: str) -> str:
    return f"import {{{symbol}}} from {_js_string(module)};"


def render_import_mock(module: str, requests: list[MockImportRequest], symbol: str = "vi") -> list[str]:
    """One ``mock`` call overriding every requested export of *module*."""
    lines = [
        f"{symbol}.mock({_js_string(module)}, async (importOriginal) => {{",
        "  const mod = { ...await importOriginal() }",
    ]
    for request in requests:
        lines.append(f"  mod[{_js_string(request.name)}] = await ({request.factory})()")
    lines.append("  return mod")
    lines.append("})")
    return lines


def render_component_mock(request: MockComponentRequest, symbol: str = "vi") -> list[str]:
    """One ``mock`` call replacing a component module.

    The factory may be a value or a function returning one; a result
    without a ``default`` key is wrapped as the module's default export.
    """
    return [
        f"{symbol}.mock({_js_string(request.path)}, async () => {{",
        f"  const factory = ({request.factory});",
        "  const result = typeof factory === 'function' ? await factory() : await factory",
        "  return 'default' in result ? result : { default: result }",
        "})",
    ]


def render_block(plan: RewritePlan, config: MacroConfig) -> str:
    """Render the whole generated block, or ``""`` for a no-op plan."""
    symbol = config.facility_symbol
    lines: list[str] = []
    for module, requests in plan.import_groups.items():
        lines.extend(render_import_mock(module, requests, symbol))
    for request in plan.component_requests:
        lines.extend(render_component_mock(request, symbol))
    if not lines:
        return ""
    if plan.needs_facility_import:
        lines.insert(0, render_facility_import(config.facility_symbol, config.facility_module))
    return "\n" + "\n".join(lines) + ";\n"


# ── Splicing ─────────────────────────────────────────


class TextSplicer:
    """Positional edits over an original text, with a source map.

    Removals and insertions are expressed in offsets of the *original*
    text.  Removed ranges may not overlap, and an insertion may not fall
    strictly inside a removed range.
    """

    def __init__(self, original: str) -> None:
        self.original = original
        self._removals: list[tuple[int, int]] = []
        self._inserts: list[tuple[int, int, str]] = []

    def _check_offset(self, offset: int) -> None:
        if not 0 <= offset <= len(self.original):
            msg = f"offset {offset} out of range 0..{len(self.original)}"
            raise ValueError(msg)

    def remove(self, start: int, end: int) -> TextSplicer:
        self._check_offset(start)
        self._check_offset(end)
        if start > end:
            msg = f"invalid range {start}..{end}"
            raise ValueError(msg)
        if start == end:
            return self
        for s, e in self._removals:
            if start < e and s < end:
                msg = f"range {start}..{end} overlaps removed range {s}..{e}"
                raise ValueError(msg)
        for offset, _, _ in self._inserts:
            if start < offset < end:
                msg = f"range {start}..{end} contains insertion at {offset}"
                raise ValueError(msg)
        self._removals.append((start, end))
        return self

    def insert(self, offset: int, text: str) -> TextSplicer:
        """Insert *text* at *offset*, after earlier insertions there."""
        self._check_offset(offset)
        for s, e in self._removals:
            if s < offset < e:
                msg = f"insertion at {offset} falls inside removed range {s}..{e}"
                raise ValueError(msg)
        self._inserts.append((offset, len(self._inserts), text))
        return self

    def _pieces(self) -> list[tuple[int | None, str]]:
        """Output pieces: ``(original offset, text)``, offset ``None`` if inserted."""
        ops = [(s, 1, e, "") for s, e in self._removals]
        ops += [(offset, 0, seq, text) for offset, seq, text in self._inserts]
        ops.sort(key=lambda op: (op[0], op[1], op[2]))

        pieces: list[tuple[int | None, str]] = []
        pos = 0
        for offset, kind, value, text in ops:
            if offset > pos:
                pieces.append((pos, self.original[pos:offset]))
                pos = offset
            if kind == 0:
                pieces.append((None, text))
            else:
                pos = value
        if pos < len(self.original):
            pieces.append((pos, self.original[pos:]))
        return pieces

    def to_string(self) -> str:
        return "".join(text for _, text in self._pieces())

    def generate_map(
        self,
        source: str | None = None,
        file: str | None = None,
        include_content: bool = False,
    ) -> SourceMap:
        """Map the start of every kept line fragment back to the original."""
        line_starts = [0]
        line_starts.extend(i + 1 for i, ch in enumerate(self.original) if ch == "\n")

        lines: list[list[Segment]] = [[]]
        gen_col = 0
        for origin, text in self._pieces():
            if origin is not None:
                line = bisect.bisect_right(line_starts, origin) - 1
                col = utf16_len(self.original[line_starts[line]:origin])
            for i, part in enumerate(text.split("\n")):
                if i:
                    lines.append([])
                    gen_col = 0
                    if origin is not None:
                        line += 1
                        col = 0
                if origin is not None and part:
                    lines[-1].append((gen_col, 0, line, col))
                gen_col += utf16_len(part)

        return SourceMap(
            file=file,
            sources=[source or ""],
            sources_content=[self.original] if include_content else None,
            mappings=encode_mappings(lines),
        )


def generate(
    source: str,
    plan: RewritePlan,
    module_id: str,
    config: MacroConfig,
    include_content: bool = False,
) -> TransformResult:
    """Apply *plan* to *source* and return the new code with its map."""
    splicer = TextSplicer(source)
    for start, end in plan.removals:
        splicer.remove(start, end)
    splicer.insert(plan.insertion_point, render_block(plan, config))
    log.debug(
        "Generated %d mock statements for %s at offset %d",
        plan.statement_count, module_id, plan.insertion_point,
    )
    return TransformResult(
        code=splicer.to_string(),
        map=splicer.generate_map(source=module_id, file=module_id, include_content=include_content),
    )
