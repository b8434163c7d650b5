"""Configuration for the mock macro transform.

The defaults match the Nuxt + Vitest setup: ``mockNuxtImport`` and
``mockComponent`` are rewritten into ``vi.mock`` calls, and the ``vi``
helper is imported from ``vitest`` when the module does not already do so.

A YAML file can override any field::

    import_helper: mockNuxtImport
    component_helper: mockComponent
    facility_module: vitest
    facility_symbol: vi
    exclude_fragments: ["/node_modules/"]
    strict_registration: true
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

log = logging.getLogger(__name__)

__all__ = [
    "ConfigError",
    "MacroConfig",
    "load_config",
]


class ConfigError(ValueError):
    """Raised when a configuration file fails validation."""


class MacroConfig(BaseModel):
    """Names and switches used by every stage of the transform."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    import_helper: str = "mockNuxtImport"
    component_helper: str = "mockComponent"
    facility_module: str = "vitest"
    facility_symbol: str = "vi"
    exclude_fragments: tuple[str, ...] = Field(default=("/node_modules/",))
    preset_source: str = "#app"
    preset_prefix: str = "use"
    strict_registration: bool = False

    @property
    def helper_names(self) -> tuple[str, str]:
        return (self.import_helper, self.component_helper)


def load_config(path: Path | str | None = None) -> MacroConfig:
    """Load a ``MacroConfig`` from YAML, or return the defaults.

    Raises
    ------
    FileNotFoundError
        If *path* is given and does not exist.
    ConfigError
        If the file is not valid YAML, is not a mapping or fails validation.
    """
    if path is None:
        return MacroConfig()

    path = Path(path)
    if not path.exists():
        msg = f"config file not found: {path}"
        raise FileNotFoundError(msg)

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        msg = f"{path} could not be parsed: {exc}"
        raise ConfigError(msg) from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        msg = f"Expected YAML mapping at top level, got {type(data).__name__}"
        raise ConfigError(msg)

    try:
        config = MacroConfig.model_validate(data)
    except ValidationError as exc:
        msg = f"{path} validation failed: {exc}"
        raise ConfigError(msg) from exc

    log.debug("Loaded config from %s", path)
    return config
