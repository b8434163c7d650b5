"""Error taxonomy and reporting channel for macro validation.

Validation failures are local to one macro call.  The matcher raises a
``MacroUsageError`` subclass for the offending call, catches it, and hands
it to a ``DiagnosticReporter`` together with the module it came from; the
walk then continues with the next call.  The reporter binds the error to
an exact line/column so an editor can point at the offending token.

``ParseFailure`` is deliberately outside the ``MacroUsageError`` tree: a
module that does not parse is passed through untouched and never reported.
"""

from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol

from mock_macro.sourcemap import utf16_len

log = logging.getLogger(__name__)

__all__ = [
    "ArgumentShapeError",
    "ArityError",
    "CollectingReporter",
    "Diagnostic",
    "DiagnosticReporter",
    "ErrorKind",
    "MacroUsageError",
    "MockMacroError",
    "ParseFailure",
    "UnresolvedImportError",
    "position_of",
]


# ── Exceptions ───────────────────────────────────────


class MockMacroError(Exception):
    """Base class for all errors raised by this package."""


class ParseFailure(MockMacroError):
    """The module source could not be parsed."""


class ErrorKind(StrEnum):
    """Classification of a macro usage error."""
    ARITY = "arity"
    ARGUMENT_SHAPE = "argument_shape"
    UNRESOLVED_IMPORT = "unresolved_import"


class MacroUsageError(MockMacroError):
    """A recognized macro call is malformed.

    Attributes
    ----------
    message:
        Human-readable explanation.
    offset:
        Character offset of the offending token, or ``None``.
    """

    kind: ErrorKind

    def __init__(self, message: str, offset: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.offset = offset


class ArityError(MacroUsageError):
    """Wrong number of arguments on a macro call."""
    kind = ErrorKind.ARITY


class ArgumentShapeError(MacroUsageError):
    """The first macro argument is not a string literal."""
    kind = ErrorKind.ARGUMENT_SHAPE


class UnresolvedImportError(MacroUsageError):
    """The requested name is not a registered import."""
    kind = ErrorKind.UNRESOLVED_IMPORT


# ── Positions ────────────────────────────────────────


def position_of(source: str, offset: int) -> tuple[int, int]:
    """Return the 1-based line and 0-based UTF-16 column of *offset* in *source*."""
    line_starts = [0]
    line_starts.extend(i + 1 for i, ch in enumerate(source) if ch == "\n")
    line_index = bisect.bisect_right(line_starts, offset) - 1
    return line_index + 1, utf16_len(source[line_starts[line_index]:offset])


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A reported macro usage error bound to a source position."""

    kind: ErrorKind
    message: str
    module_id: str
    offset: int | None = None
    line: int | None = None
    column: int | None = None

    def __str__(self) -> str:
        if self.line is None:
            return f"{self.module_id}: {self.message}"
        return f"{self.module_id}:{self.line}:{self.column}: {self.message}"


# ── Reporting channel ────────────────────────────────


class DiagnosticReporter(Protocol):
    """Host error channel for macro usage errors."""

    def report(self, error: MacroUsageError, module_id: str, source: str) -> None:
        ...


@dataclass
class CollectingReporter:
    """Reporter that accumulates diagnostics and logs each one."""

    diagnostics: list[Diagnostic] = field(default_factory=list)

    def report(self, error: MacroUsageError, module_id: str, source: str) -> None:
        line = column = None
        if error.offset is not None:
            line, column = position_of(source, error.offset)
        diagnostic = Diagnostic(
            kind=error.kind,
            message=error.message,
            module_id=module_id,
            offset=error.offset,
            line=line,
            column=column,
        )
        self.diagnostics.append(diagnostic)
        log.warning("%s", diagnostic)

    @property
    def has_errors(self) -> bool:
        return bool(self.diagnostics)

    def for_module(self, module_id: str) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.module_id == module_id]

    def clear(self) -> None:
        self.diagnostics.clear()
