"""Cheap pre-filter deciding which modules are worth parsing.

Most modules in a build never mention a mock helper, so a substring test
on the raw text runs before any parse.  False positives (the name inside a
comment or string) are fine: the matcher simply finds nothing.
"""

from __future__ import annotations

import logging
from pathlib import Path

from mock_macro.config import MacroConfig

log = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_PATTERNS",
    "is_excluded",
    "needs_transform",
    "scan_directory",
]

DEFAULT_PATTERNS: tuple[str, ...] = (
    "*.js", "*.mjs", "*.cjs", "*.jsx",
    "*.ts", "*.mts", "*.cts", "*.tsx",
)


def is_excluded(module_id: str, config: MacroConfig) -> bool:
    """Return ``True`` for modules from a third-party dependency tree."""
    normalized = module_id.replace("\\", "/")
    return any(fragment in normalized for fragment in config.exclude_fragments)


def needs_transform(code: str, module_id: str, config: MacroConfig) -> bool:
    """Return ``True`` if *code* may contain a macro call worth rewriting."""
    if not any(name in code for name in config.helper_names):
        return False
    return not is_excluded(module_id, config)


def scan_directory(
    directory: Path,
    config: MacroConfig,
    patterns: tuple[str, ...] = DEFAULT_PATTERNS,
) -> list[Path]:
    """List files under *directory* that pass the pre-filter.

    Unreadable files are skipped.
    """
    candidates: set[Path] = set()
    for pattern in patterns:
        candidates.update(directory.rglob(pattern))

    found: list[Path] = []
    for path in sorted(candidates):
        if not path.is_file():
            continue
        try:
            code = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            log.debug("Skipping unreadable file %s", path)
            continue
        if needs_transform(code, path.as_posix(), config):
            found.append(path)

    log.debug("Scanned %s: %d candidate modules", directory, len(found))
    return found
