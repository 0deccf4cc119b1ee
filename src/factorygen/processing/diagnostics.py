"""Diagnostic reporting for generation passes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from threading import RLock
from typing import Protocol, runtime_checkable

from factorygen.metadata import Declaration

logger = logging.getLogger(__name__)

__all__ = ["Diagnostic", "DiagnosticKind", "DiagnosticSink", "DiagnosticCollector"]


class DiagnosticKind(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"


_LEVELS = {
    DiagnosticKind.ERROR: logging.ERROR,
    DiagnosticKind.WARNING: logging.WARNING,
    DiagnosticKind.NOTE: logging.INFO,
}


@dataclass(frozen=True, slots=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str
    declaration: Declaration | None = None
    code: str | None = None

    def format(self) -> str:
        location = self.declaration.location if self.declaration is not None else None
        prefix = f"{location}: " if location is not None and location.path is not None else ""
        code = f" [{self.code}]" if self.code else ""
        return f"{prefix}{self.kind.value}: {self.message}{code}"


@runtime_checkable
class DiagnosticSink(Protocol):
    def report(
        self,
        declaration: Declaration | None,
        message: str,
        *,
        kind: DiagnosticKind = DiagnosticKind.ERROR,
        code: str | None = None,
    ) -> None:
        ...


class DiagnosticCollector:
    """Default sink: keeps diagnostics in order and logs each one."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: list[Diagnostic] = []

    def report(
        self,
        declaration: Declaration | None,
        message: str,
        *,
        kind: DiagnosticKind = DiagnosticKind.ERROR,
        code: str | None = None,
    ) -> None:
        diagnostic = Diagnostic(kind=kind, message=message, declaration=declaration, code=code)
        with self._lock:
            self._items.append(diagnostic)
        logger.log(_LEVELS[kind], "%s", diagnostic.format())

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        with self._lock:
            return tuple(self._items)

    @property
    def errors(self) -> tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.kind is DiagnosticKind.ERROR)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()
