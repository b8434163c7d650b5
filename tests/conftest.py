"""Shared fixtures for the mock-macro test suite."""

from __future__ import annotations

import pytest

from mock_macro.config import MacroConfig
from mock_macro.diagnostics import CollectingReporter
from mock_macro.models import ComponentBinding, ImportBinding
from mock_macro.registry import BindingRegistry


def make_import(name: str, source: str, alias: str | None = None) -> ImportBinding:
    return ImportBinding(name=name, as_=alias, from_=source)


@pytest.fixture()
def config() -> MacroConfig:
    return MacroConfig()


@pytest.fixture()
def registry(config: MacroConfig) -> BindingRegistry:
    """A ready registry with a few composables and one component."""
    reg = BindingRegistry(config)
    reg.extend_imports([
        make_import("useFoo", "#imports", "useFoo"),
        make_import("useBar", "#imports"),
        make_import("useRoute", "vue-router"),
        make_import("foo", "m", "bar"),
    ])
    reg.set_components([
        ComponentBinding(
            pascal_name="MyButton",
            kebab_name="my-button",
            file_path="/app/components/MyButton.vue",
        ),
    ])
    reg.mark_ready()
    return reg


@pytest.fixture()
def reporter() -> CollectingReporter:
    return CollectingReporter()
