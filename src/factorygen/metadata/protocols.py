# factorygen/metadata/protocols.py
from __future__ import annotations

from typing import Iterable, Protocol, runtime_checkable

from .model import Declaration, TypeReference

__all__ = ["MetadataProvider"]


@runtime_checkable
class MetadataProvider(Protocol):
    """Source of declaration metadata consumed by the generator."""

    def get_declaration(self, qualified_name: str) -> Declaration | None:
        """Return metadata for ``qualified_name`` or ``None`` when unknown."""
        ...

    def resolve_reference(self, reference: TypeReference) -> str | None:
        """Resolve an unresolved type name to a canonical qualified name."""
        ...

    def iter_annotated(self) -> Iterable[Declaration]:
        """Yield every declaration carrying a factory annotation, in stable order."""
        ...
