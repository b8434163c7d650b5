"""Parser adapter: JavaScript / TypeScript source to a tree-sitter tree.

tree-sitter is error tolerant, so a tree containing ``ERROR`` or
``MISSING`` nodes is treated as a parse failure and the module is left
alone.  Node offsets are byte offsets into the UTF-8 encoding; every
offset leaving this module is converted to a character offset into the
original ``str``.
"""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import PurePosixPath

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Tree

from mock_macro.diagnostics import ParseFailure

__all__ = [
    "ParsedModule",
    "grammar_for",
    "parse_module",
    "string_value",
]


@lru_cache(maxsize=None)
def _language(grammar: str) -> Language:
    if grammar == "typescript":
        return Language(tree_sitter_typescript.language_typescript())
    if grammar == "tsx":
        return Language(tree_sitter_typescript.language_tsx())
    return Language(tree_sitter_javascript.language())


def grammar_for(module_id: str) -> str:
    """Pick the grammar for a module id, ignoring any query string."""
    path = module_id.split("?", 1)[0]
    suffix = PurePosixPath(path.replace("\\", "/")).suffix.lower()
    if suffix in (".ts", ".mts", ".cts"):
        return "typescript"
    if suffix == ".tsx":
        return "tsx"
    return "javascript"


class ParsedModule:
    """A parsed module with byte/character offset bookkeeping."""

    __slots__ = ("_ascii", "data", "grammar", "module_id", "source", "tree")

    def __init__(self, source: str, module_id: str, tree: Tree, data: bytes, grammar: str) -> None:
        self.source = source
        self.module_id = module_id
        self.tree = tree
        self.data = data
        self.grammar = grammar
        self._ascii = len(data) == len(source)

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def char_offset(self, byte_offset: int) -> int:
        if self._ascii:
            return byte_offset
        return len(self.data[:byte_offset].decode("utf-8"))

    def start(self, node: Node) -> int:
        return self.char_offset(node.start_byte)

    def end(self, node: Node) -> int:
        return self.char_offset(node.end_byte)

    def text(self, node: Node) -> str:
        return self.data[node.start_byte:node.end_byte].decode("utf-8")


def parse_module(code: str, module_id: str) -> ParsedModule:
    """Parse *code* with the grammar matching *module_id*.

    Raises
    ------
    ParseFailure
        If the tree contains any error or missing node.
    """
    grammar = grammar_for(module_id)
    data = code.encode("utf-8")
    tree = Parser(_language(grammar)).parse(data)
    if tree.root_node.has_error:
        msg = f"{module_id} does not parse as {grammar}"
        raise ParseFailure(msg)
    return ParsedModule(code, module_id, tree, data, grammar)


_ESCAPE_RE = re.compile(
    r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|[\s\S])"
)

_SIMPLE_ESCAPES = {
    "n": "\n", "t": "\t", "r": "\r", "b": "\b",
    "f": "\f", "v": "\v", "0": "\0",
}


def _unescape(match: re.Match[str]) -> str:
    seq = match.group(1)
    if seq.startswith("u{"):
        return chr(int(seq[2:-1], 16))
    if seq[0] in "ux" and len(seq) > 1:
        return chr(int(seq[1:], 16))
    if seq in ("\n", "\r\n", "\r", "\u2028", "\u2029"):
        return ""
    return _SIMPLE_ESCAPES.get(seq, seq)


def string_value(module: ParsedModule, node: Node) -> str | None:
    """Return the value of a string-literal node, or ``None``."""
    if node.type != "string":
        return None
    raw = module.text(node)[1:-1]
    if "\\" not in raw:
        return raw
    value = _ESCAPE_RE.sub(_unescape, raw)
    # \uD83D\uDE00 style escapes decode to a surrogate pair; join them
    return value.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "surrogatepass")
