"""In-memory metadata provider."""

from __future__ import annotations

import logging
from threading import RLock
from typing import Iterable

from .model import Declaration, TypeReference

logger = logging.getLogger(__name__)


class SimpleMetadataProvider:
    """Provider backed by explicitly added declarations.

    Hosts that already own a type model (or tests) feed declarations in
    directly; discovery order is insertion order.
    """

    def __init__(self, declarations: Iterable[Declaration] = ()) -> None:
        self._lock = RLock()
        self._store: dict[str, Declaration] = {}
        for declaration in declarations:
            self.add(declaration)

    def add(self, declaration: Declaration) -> Declaration:
        with self._lock:
            self._store[declaration.qualified_name] = declaration
        return declaration

    def extend(self, declarations: Iterable[Declaration]) -> None:
        for declaration in declarations:
            self.add(declaration)

    # --- MetadataProvider ---

    def get_declaration(self, qualified_name: str) -> Declaration | None:
        with self._lock:
            return self._store.get(qualified_name)

    def resolve_reference(self, reference: TypeReference) -> str | None:
        with self._lock:
            if reference.module:
                scoped = f"{reference.module}.{reference.name}"
                if scoped in self._store:
                    return scoped
            if reference.name in self._store:
                return reference.name
        logger.debug("unresolved reference %s", reference)
        return None

    def iter_annotated(self) -> Iterable[Declaration]:
        with self._lock:
            return tuple(d for d in self._store.values() if d.annotation is not None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
