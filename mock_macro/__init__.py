"""Rewrite ``mockNuxtImport()`` / ``mockComponent()`` macros into ``vi.mock()`` calls."""

from mock_macro.codegen import TransformResult
from mock_macro.config import MacroConfig, load_config
from mock_macro.diagnostics import (
    ArgumentShapeError,
    ArityError,
    CollectingReporter,
    Diagnostic,
    MacroUsageError,
    ParseFailure,
    UnresolvedImportError,
)
from mock_macro.models import ComponentBinding, ImportBinding, ImportPreset
from mock_macro.registry import BindingRegistry
from mock_macro.transform import PLUGIN_NAME, MockTransformPlugin, transform

__all__ = [
    "PLUGIN_NAME",
    "ArgumentShapeError",
    "ArityError",
    "BindingRegistry",
    "CollectingReporter",
    "ComponentBinding",
    "Diagnostic",
    "ImportBinding",
    "ImportPreset",
    "MacroConfig",
    "MacroUsageError",
    "MockTransformPlugin",
    "ParseFailure",
    "TransformResult",
    "UnresolvedImportError",
    "load_config",
    "transform",
]
