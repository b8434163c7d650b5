"""Transform entry point: rewrite mock macros in one module.

Pipeline per module::

    pre-filter -> parse -> match/validate -> plan -> generate

``transform`` returns ``None`` whenever nothing changes: the module does
not mention a helper, lives under ``node_modules``, does not parse, or
contains no valid macro call.  Callers must treat ``None`` as "leave the
module byte-for-byte as it is".

Precondition: the host has finished registering bindings for the current
build generation (``BindingRegistry.mark_ready()``) before the first
transform.  With ``strict_registration`` a transform against a registry
that is not ready raises ``RegistryNotReadyError``; otherwise it logs a
warning once per generation and proceeds with what is registered.
"""

from __future__ import annotations

import logging

from mock_macro.codegen import TransformResult, generate
from mock_macro.config import MacroConfig
from mock_macro.diagnostics import CollectingReporter, Diagnostic, DiagnosticReporter, ParseFailure
from mock_macro.matcher import match_macros
from mock_macro.parser import parse_module
from mock_macro.planner import plan_rewrite
from mock_macro.registry import BindingRegistry, RegistryNotReadyError
from mock_macro.scanner import is_excluded, needs_transform

log = logging.getLogger(__name__)

__all__ = [
    "PLUGIN_NAME",
    "MockTransformPlugin",
    "transform",
]

PLUGIN_NAME = "nuxt:vitest:mock-transform"


class MockTransformPlugin:
    """Build-tool plugin rewriting ``mockNuxtImport`` / ``mockComponent``.

    Usage::

        plugin = MockTransformPlugin(registry)
        result = plugin.transform(code, "/app/tests/foo.spec.ts")
        if result is not None:
            code, sourcemap = result.code, result.map
    """

    name = PLUGIN_NAME
    enforce = "post"

    def __init__(
        self,
        registry: BindingRegistry,
        config: MacroConfig | None = None,
        reporter: DiagnosticReporter | None = None,
    ) -> None:
        self.registry = registry
        self.config = config or MacroConfig()
        self.reporter: DiagnosticReporter = reporter if reporter is not None else CollectingReporter()
        self._warned_generation: int | None = None

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return list(getattr(self.reporter, "diagnostics", []))

    def _check_ready(self) -> None:
        if self.registry.ready:
            return
        if self.config.strict_registration:
            msg = (
                f"registry generation {self.registry.generation} is not ready; "
                "call mark_ready() after registering bindings"
            )
            raise RegistryNotReadyError(msg)
        if self._warned_generation != self.registry.generation:
            self._warned_generation = self.registry.generation
            log.warning(
                "Transforming before registry generation %d was marked ready",
                self.registry.generation,
            )

    def transform(self, code: str, module_id: str) -> TransformResult | None:
        if not needs_transform(code, module_id, self.config):
            if is_excluded(module_id, self.config):
                log.debug("Skipping excluded module %s", module_id)
            return None

        self._check_ready()

        try:
            module = parse_module(code, module_id)
        except ParseFailure as exc:
            log.debug("Skipping %s: %s", module_id, exc)
            return None

        match = match_macros(module, self.registry.snapshot(), self.config, self.reporter)
        plan = plan_rewrite(match)
        if plan.is_noop:
            log.debug("No mock macros to rewrite in %s", module_id)
            return None

        result = generate(code, plan, module_id, self.config)
        log.info(
            "Rewrote %s: %d import mocks in %d modules, %d component mocks",
            module_id,
            len(match.imports),
            len(plan.import_groups),
            len(plan.component_requests),
        )
        return result


def transform(
    code: str,
    module_id: str,
    registry: BindingRegistry,
    config: MacroConfig | None = None,
    reporter: DiagnosticReporter | None = None,
) -> TransformResult | None:
    """Rewrite one module with a throwaway plugin instance."""
    return MockTransformPlugin(registry, config, reporter).transform(code, module_id)
