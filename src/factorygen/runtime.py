# factorygen/runtime.py
"""Runtime support imported by generated factory modules.

Nothing here runs at generation time. :class:`UnknownIdentifierError` is the
failure raised by a generated ``create()`` and is intentionally not part of
the :class:`~factorygen.exceptions.FactoryGenError` hierarchy.
"""
from __future__ import annotations

__all__ = ["UnknownIdentifierError"]


class UnknownIdentifierError(LookupError):
    """Raised by a generated factory when no member matches ``identifier``."""

    def __init__(self, identifier: object, group: str) -> None:
        super().__init__(f"Unknown identifier {identifier!r} for factory group {group!r}")
        self.identifier = identifier
        self.group = group
