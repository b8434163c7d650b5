"""Macro matcher: find and validate mock macro calls in a parsed module.

One pre-order walk over the tree recognizes three things:

1. The first ``import { vi } from "vitest"`` declaration.  Its end offset
   becomes the insertion point for generated code.  Type-only imports and
   renamed bindings (``{ vi as v }``) do not count: the first is erased at
   compile time and Vitest only hoists calls spelled ``vi.mock``.
2. ``mockNuxtImport("name", factory)`` calls, resolved against the import
   bindings.  An unknown name is an error.
3. ``mockComponent("NameOrPath", factory)`` calls, resolved against the
   component bindings.  An unknown name is used as the module path as is.

Each malformed call is reported and skipped; the walk goes on.  The
arguments of a call that *was* recorded are not walked, so a macro nested
inside another macro's factory stays part of the outer factory text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from tree_sitter import Node

from mock_macro.config import MacroConfig
from mock_macro.diagnostics import (
    ArgumentShapeError,
    ArityError,
    DiagnosticReporter,
    MacroUsageError,
    UnresolvedImportError,
)
from mock_macro.models import ImportBinding
from mock_macro.parser import ParsedModule, string_value
from mock_macro.registry import RegistrySnapshot

log = logging.getLogger(__name__)

__all__ = [
    "MacroMatcher",
    "MatchResult",
    "MockComponentRequest",
    "MockImportRequest",
    "match_macros",
]


# ── Data models ──────────────────────────────────────


@dataclass(frozen=True, slots=True)
class MockImportRequest:
    """A validated ``mockNuxtImport`` call.

    Attributes
    ----------
    name:
        The requested (alias-or-name) key.
    binding:
        Registry binding the name resolved to.
    factory:
        Verbatim source text of the factory argument.
    span:
        ``(start, end)`` character range of the whole call.
    """
    name: str
    binding: ImportBinding
    factory: str
    span: tuple[int, int]


@dataclass(frozen=True, slots=True)
class MockComponentRequest:
    """A validated ``mockComponent`` call."""
    path: str
    factory: str
    span: tuple[int, int]


@dataclass(slots=True)
class MatchResult:
    """Everything the matcher collected from one module."""
    insertion_point: int = 0
    has_facility_import: bool = False
    imports: list[MockImportRequest] = field(default_factory=list)
    components: list[MockComponentRequest] = field(default_factory=list)
    rejected: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.imports and not self.components


# ── Matcher ──────────────────────────────────────────


def _arguments(call: Node) -> list[Node] | None:
    args = call.child_by_field_name("arguments")
    if args is None or args.type != "arguments":
        return None
    return [a for a in args.named_children if a.type != "comment"]


def _import_source(node: Node) -> Node | None:
    source = node.child_by_field_name("source")
    if source is not None:
        return source
    # older grammars wrap the source in a visible from_clause
    for child in node.named_children:
        if child.type == "from_clause":
            return child.child_by_field_name("source")
    return None


def _is_type_only(node: Node) -> bool:
    """``import type {...}`` statements and ``{ type x }`` specifiers are erased."""
    for child in node.children:
        if not child.is_named and child.type in ("type", "typeof"):
            return True
        if child.type == "import_clause":
            if any(not c.is_named and c.type in ("type", "typeof") for c in child.children):
                return True
    return False


class MacroMatcher:
    """Single-use visitor over one parsed module."""

    def __init__(
        self,
        module: ParsedModule,
        registry: RegistrySnapshot,
        config: MacroConfig,
        reporter: DiagnosticReporter,
    ) -> None:
        self.module = module
        self.registry = registry
        self.config = config
        self.reporter = reporter
        self.result = MatchResult()

    def run(self) -> MatchResult:
        stack: list[Node] = [self.module.root]
        while stack:
            node = stack.pop()
            if node.type == "import_statement":
                self._visit_import(node)
                continue
            if node.type == "call_expression":
                try:
                    if self._visit_call(node):
                        continue
                except MacroUsageError as exc:
                    self.result.rejected += 1
                    self.reporter.report(exc, self.module.module_id, self.module.source)
            stack.extend(reversed(node.children))
        return self.result

    # ── facility import ──────────────────────────────

    def _visit_import(self, node: Node) -> None:
        if self.result.has_facility_import:
            return
        source = _import_source(node)
        if source is None or string_value(self.module, source) != self.config.facility_module:
            return
        if _is_type_only(node) or not self._imports_facility(node):
            return
        self.result.insertion_point = self.module.end(node)
        self.result.has_facility_import = True

    def _imports_facility(self, node: Node) -> bool:
        """Whether *node* binds the facility symbol under its own name as a value."""
        for clause in node.named_children:
            if clause.type != "import_clause":
                continue
            for part in clause.named_children:
                if part.type != "named_imports":
                    continue
                for spec in part.named_children:
                    if spec.type != "import_specifier" or _is_type_only(spec):
                        continue
                    name = spec.child_by_field_name("name")
                    if name is None:
                        continue
                    imported = string_value(self.module, name)
                    if imported is None:
                        imported = self.module.text(name)
                    if imported != self.config.facility_symbol:
                        continue
                    # hoisting only recognizes the facility under its own name
                    if spec.child_by_field_name("alias") is None:
                        return True
        return False

    # ── macro calls ──────────────────────────────────

    def _visit_call(self, call: Node) -> bool:
        """Record *call* if it is a valid macro call; return whether it was."""
        callee = call.child_by_field_name("function")
        if callee is None or callee.type != "identifier":
            return False
        helper = self.module.text(callee)
        if helper not in self.config.helper_names:
            return False
        args = _arguments(call)
        if args is None:
            return False

        call_start = self.module.start(call)
        if len(args) != 2:
            msg = f"{helper}() should have exactly 2 arguments"
            raise ArityError(msg, call_start)

        value = string_value(self.module, args[0])
        if value is None:
            msg = f"The first argument of {helper}() must be a string literal"
            raise ArgumentShapeError(msg, self.module.start(args[0]))

        span = (call_start, self.module.end(call))
        factory = self.module.text(args[1])

        if helper == self.config.import_helper:
            binding = self.registry.find_import(value)
            if binding is None:
                msg = f'Cannot find import "{value}" to mock'
                raise UnresolvedImportError(msg, call_start)
            self.result.imports.append(MockImportRequest(value, binding, factory, span))
        else:
            component = self.registry.find_component(value)
            path = component.file_path if component is not None and component.file_path else value
            if component is None:
                log.debug("Component %r not registered, mocking it as a path", value)
            self.result.components.append(MockComponentRequest(path, factory, span))
        return True


def match_macros(
    module: ParsedModule,
    registry: RegistrySnapshot,
    config: MacroConfig,
    reporter: DiagnosticReporter,
) -> MatchResult:
    """Walk *module* once and collect validated macro calls."""
    return MacroMatcher(module, registry, config, reporter).run()
