"""Thread-safe binding registry fed by host notifications.

The ``BindingRegistry`` holds the two read-mostly collections the
transform resolves macro arguments against:

- **imports**: symbols auto-imported into every module, appended by the
  host's ``imports:extend`` and ``imports:sources`` notifications.
- **components**: UI components, replaced wholesale by the host's
  ``components:extend`` notification.

Registration and transformation follow a two-phase protocol: the host
performs all registrations for a build generation, calls
``mark_ready()``, and only then transforms modules.  Every mutation bumps
``generation`` and clears the ready flag, so a late registration is visible
as "not ready" instead of silently racing a transform.  A transform never
reads the live lists; it takes one ``snapshot()`` and resolves against it.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from mock_macro.config import MacroConfig
from mock_macro.models import ComponentBinding, ImportBinding, ImportPreset

log = logging.getLogger(__name__)

__all__ = [
    "BindingRegistry",
    "RegistryLoadError",
    "RegistryNotReadyError",
    "RegistrySnapshot",
]


class RegistryLoadError(ValueError):
    """Raised when a registry file fails validation."""


class RegistryNotReadyError(RuntimeError):
    """Raised when a strict transform runs before registration completed."""


@dataclass(frozen=True, slots=True)
class RegistrySnapshot:
    """Immutable view of the registry for a single transform."""

    imports: tuple[ImportBinding, ...] = ()
    components: tuple[ComponentBinding, ...] = ()
    generation: int = 0

    def find_import(self, name: str) -> ImportBinding | None:
        """Return the first binding whose alias-or-name equals *name*."""
        for binding in self.imports:
            if binding.key == name:
                return binding
        return None

    def find_component(self, name: str) -> ComponentBinding | None:
        """Return the first component addressable by *name*."""
        for component in self.components:
            if name in component.lookup_names:
                return component
        return None


class BindingRegistry:
    """Append/replace store for import and component bindings.

    Usage::

        registry = BindingRegistry()
        registry.extend_imports([ImportBinding(name="useFoo", **{"from": "#imports"})])
        registry.set_components(components)
        registry.mark_ready()

        snap = registry.snapshot()
        snap.find_import("useFoo")
    """

    __slots__ = ("_components", "_config", "_generation", "_imports", "_lock", "_ready_generation")

    def __init__(self, config: MacroConfig | None = None) -> None:
        self._config = config or MacroConfig()
        self._lock = threading.Lock()
        self._imports: list[ImportBinding] = []
        self._components: list[ComponentBinding] = []
        self._generation = 0
        self._ready_generation: int | None = None

    # ── host notifications ───────────────────────────────

    def extend_imports(self, bindings: Iterable[ImportBinding]) -> None:
        """Append auto-import bindings (``imports:extend``)."""
        items = list(bindings)
        with self._lock:
            self._imports.extend(items)
            self._generation += 1
        log.debug("Registered %d import bindings", len(items))

    def extend_presets(self, presets: Iterable[ImportPreset]) -> None:
        """Append composables from preset sources (``imports:sources``).

        Only presets from ``preset_source`` contribute, and only names
        starting with ``preset_prefix``; each becomes a binding aliased to
        itself.
        """
        items: list[ImportBinding] = []
        for preset in presets:
            if preset.from_ != self._config.preset_source:
                continue
            for name in preset.imports:
                if str(name).startswith(self._config.preset_prefix):
                    items.append(ImportBinding(name=name, as_=name, from_=preset.from_))
        with self._lock:
            self._imports.extend(items)
            self._generation += 1
        log.debug("Registered %d preset bindings", len(items))

    def set_components(self, components: Iterable[ComponentBinding]) -> None:
        """Replace the known components (``components:extend``)."""
        items = list(components)
        with self._lock:
            self._components = items
            self._generation += 1
        log.debug("Registered %d components", len(items))

    # ── readiness ────────────────────────────────────────

    def mark_ready(self) -> None:
        """Declare registration complete for the current generation."""
        with self._lock:
            self._ready_generation = self._generation

    @property
    def ready(self) -> bool:
        return self._ready_generation == self._generation

    @property
    def generation(self) -> int:
        return self._generation

    # ── lookups ──────────────────────────────────────────

    def snapshot(self) -> RegistrySnapshot:
        with self._lock:
            return RegistrySnapshot(
                imports=tuple(self._imports),
                components=tuple(self._components),
                generation=self._generation,
            )

    def find_import(self, name: str) -> ImportBinding | None:
        return self.snapshot().find_import(name)

    def find_component(self, name: str) -> ComponentBinding | None:
        return self.snapshot().find_component(name)

    @property
    def imports(self) -> tuple[ImportBinding, ...]:
        return self.snapshot().imports

    @property
    def components(self) -> tuple[ComponentBinding, ...]:
        return self.snapshot().components

    # ── file loading ─────────────────────────────────────

    @classmethod
    def from_file(cls, path: Path | str, config: MacroConfig | None = None) -> BindingRegistry:
        """Build a ready registry from a YAML or JSON document.

        The document is a mapping with optional ``imports``, ``presets``
        and ``components`` lists in the host's wire format.

        Raises
        ------
        FileNotFoundError
            If *path* does not exist.
        RegistryLoadError
            If the document has the wrong shape.
        """
        path = Path(path)
        if not path.exists():
            msg = f"registry file not found: {path}"
            raise FileNotFoundError(msg)

        raw = path.read_text(encoding="utf-8")
        try:
            data: Any = json.loads(raw) if path.suffix == ".json" else yaml.safe_load(raw)
        except (json.JSONDecodeError, yaml.YAMLError) as exc:
            msg = f"{path} could not be parsed: {exc}"
            raise RegistryLoadError(msg) from exc
        if data is None:
            data = {}
        if not isinstance(data, dict):
            msg = f"Expected mapping at top level, got {type(data).__name__}"
            raise RegistryLoadError(msg)

        registry = cls(config)
        try:
            registry.extend_imports(ImportBinding.model_validate(i) for i in data.get("imports") or [])
            registry.extend_presets(ImportPreset.model_validate(p) for p in data.get("presets") or [])
            registry.set_components(ComponentBinding.model_validate(c) for c in data.get("components") or [])
        except ValidationError as exc:
            msg = f"{path} validation failed: {exc}"
            raise RegistryLoadError(msg) from exc

        registry.mark_ready()
        log.info(
            "Loaded registry from %s (%d imports, %d components)",
            path, len(registry.imports), len(registry.components),
        )
        return registry
