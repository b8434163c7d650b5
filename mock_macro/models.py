"""Binding models fed by the host build pipeline.

The host delivers these as JSON-shaped payloads (``imports:extend``,
``imports:sources`` and ``components:extend`` notifications), so every
model accepts the camelCase / reserved-word wire names through aliases.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "ComponentBinding",
    "ImportBinding",
    "ImportPreset",
]


class _WireModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class ImportBinding(_WireModel):
    """A symbol the host makes available in scope without an explicit import.

    Attributes
    ----------
    name:
        Exported name in the source module.
    as_:
        Local alias, if the symbol is exposed under a different name.
    from_:
        Module the symbol really comes from (e.g. ``"#imports"``).
    """

    name: str
    as_: str | None = Field(default=None, alias="as")
    from_: str = Field(alias="from")

    @property
    def key(self) -> str:
        """Lookup key: the alias when present, else the name."""
        return self.as_ or self.name


class ImportPreset(_WireModel):
    """A preset import source: one module and the names it exports."""

    from_: str = Field(alias="from")
    imports: list[str] = Field(default_factory=list)


class ComponentBinding(_WireModel):
    """A UI component known to the host, addressable by several names."""

    pascal_name: str = Field(default="", alias="pascalName")
    kebab_name: str = Field(default="", alias="kebabName")
    file_path: str = Field(alias="filePath")

    @property
    def lookup_names(self) -> frozenset[str]:
        return frozenset(n for n in (self.pascal_name, self.kebab_name) if n)
