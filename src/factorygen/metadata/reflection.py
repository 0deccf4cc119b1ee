"""Runtime metadata provider built on :mod:`inspect`.

Imports the configured modules and describes live objects. Used when the
annotated code is importable at generation time; ``@factory(type=Drink)``
then carries the group as a live class (the direct resolution path).
"""

from __future__ import annotations

import builtins
import enum
import importlib
import inspect
import logging
import sys
import typing
from pathlib import Path
from typing import Any, Iterable, Iterator

from factorygen.loaders import SourceLoader
from factorygen.naming import QualifiedName, is_public_path

from .model import (
    ANNOTATION_ATTR,
    DEFAULT_CONSTRUCTOR,
    ConstructorInfo,
    Declaration,
    DeclarationKind,
    Modifier,
    SourceLocation,
    TypeReference,
    get_annotation,
)

logger = logging.getLogger(__name__)

__all__ = ["ReflectionMetadataProvider", "qualified_name_of"]

_IGNORED_BASES: tuple[Any, ...] = (object, typing.Generic, typing.Protocol)


def qualified_name_of(obj: Any) -> str:
    """Canonical ``module.qualname`` of a live class."""
    return f"{obj.__module__}.{obj.__qualname__}"


def _is_protocol(cls: type) -> bool:
    return bool(vars(cls).get("_is_protocol", False))


def _ignored_base(base: type) -> bool:
    return base in _IGNORED_BASES or qualified_name_of(base) in {"abc.ABC", "typing_extensions.Protocol"}


class ReflectionMetadataProvider:
    """:class:`~factorygen.metadata.protocols.MetadataProvider` over imported modules."""

    def __init__(
        self,
        modules: Iterable[str] = (),
        *,
        loader: SourceLoader | None = None,
        attribute: str = ANNOTATION_ATTR,
    ) -> None:
        self.loader = loader or SourceLoader()
        self.attribute = attribute
        self.modules: list[str] = self.loader.autodiscover(modules)
        self._cache: dict[str, Declaration] = {}

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def _lookup(self, qualified_name: str) -> Any | None:
        parts = qualified_name.split(".")
        for i in range(len(parts) - 1, 0, -1):
            module_name = ".".join(parts[:i])
            try:
                module = importlib.import_module(module_name)
            except ModuleNotFoundError as exc:
                # Only a missing target means "try a shorter module path".
                if exc.name and (module_name == exc.name or module_name.startswith(f"{exc.name}.")):
                    continue
                raise
            obj: Any = module
            for attr in parts[i:]:
                obj = getattr(obj, attr, None)
                if obj is None:
                    break
            if obj is not None:
                return obj
        return None

    # ------------------------------------------------------------------
    # MetadataProvider
    # ------------------------------------------------------------------
    def get_declaration(self, qualified_name: str) -> Declaration | None:
        cached = self._cache.get(qualified_name)
        if cached is not None:
            return cached
        obj = self._lookup(qualified_name)
        if obj is None or not (inspect.isclass(obj) or inspect.isfunction(obj)):
            return None
        declaration = self.describe(obj)
        self._cache[qualified_name] = declaration
        return declaration

    def resolve_reference(self, reference: TypeReference) -> str | None:
        if reference.module is None:
            obj = self._lookup(reference.name)
        else:
            module = importlib.import_module(reference.module)
            head, *rest = reference.name.split(".")
            obj = vars(module).get(head, getattr(builtins, head, None))
            for attr in rest:
                obj = getattr(obj, attr, None)
            if not inspect.isclass(obj) and "." in reference.name:
                obj = self._lookup(reference.name)
        if not inspect.isclass(obj):
            logger.debug("unresolved reference %s", reference)
            return None
        return qualified_name_of(obj)

    def iter_annotated(self) -> Iterator[Declaration]:
        seen: set[int] = set()
        for module_name in self.modules:
            module = sys.modules[module_name]
            for obj in self._walk(vars(module).values(), module_name):
                if id(obj) in seen or get_annotation(obj, self.attribute) is None:
                    continue
                seen.add(id(obj))
                yield self.describe(obj)

    def _walk(self, values: Iterable[Any], module_name: str) -> Iterator[Any]:
        for obj in list(values):
            if not (inspect.isclass(obj) or inspect.isfunction(obj)):
                continue
            if getattr(obj, "__module__", None) != module_name:
                continue
            yield obj
            if inspect.isclass(obj):
                nested = [
                    v
                    for v in vars(obj).values()
                    if inspect.isclass(v) and v.__qualname__.startswith(f"{obj.__qualname__}.")
                ]
                yield from self._walk(nested, module_name)

    # ------------------------------------------------------------------
    # Describe
    # ------------------------------------------------------------------
    def describe(self, obj: Any) -> Declaration:
        qualname = obj.__qualname__
        local = "<locals>" in qualname
        name = QualifiedName.try_of(obj) or QualifiedName(
            module=obj.__module__,
            qualname=qualname.replace("<locals>", "locals"),
        )
        modifiers = set()
        if not local and is_public_path(qualname):
            modifiers.add(Modifier.PUBLIC)
        location = self._location(obj)
        annotation = get_annotation(obj, self.attribute)

        if not inspect.isclass(obj):
            return Declaration(
                name=name,
                kind=DeclarationKind.FUNCTION,
                modifiers=frozenset(modifiers),
                constructors=(),
                annotation=annotation,
                location=location,
            )

        if _is_protocol(obj):
            kind = DeclarationKind.INTERFACE
        elif issubclass(obj, enum.Enum):
            kind = DeclarationKind.ENUM
        else:
            kind = DeclarationKind.CLASS

        if inspect.isabstract(obj):
            modifiers.add(Modifier.ABSTRACT)

        bases = [b for b in obj.__bases__ if not _ignored_base(b)]
        interfaces = tuple(qualified_name_of(b) for b in bases if _is_protocol(b))
        parents: tuple[str, ...] = ()
        if kind is not DeclarationKind.INTERFACE:
            parents = tuple(qualified_name_of(b) for b in bases if not _is_protocol(b))

        return Declaration(
            name=name,
            kind=kind,
            modifiers=frozenset(modifiers),
            interfaces=interfaces,
            superclass=parents[0] if parents else None,
            bases=parents,
            constructors=(self._constructor(obj),),
            annotation=annotation,
            location=location,
        )

    @staticmethod
    def _constructor(cls: type) -> ConstructorInfo:
        if cls.__init__ is object.__init__ and cls.__new__ is object.__new__:
            return DEFAULT_CONSTRUCTOR
        try:
            signature = inspect.signature(cls)
        except (TypeError, ValueError):
            logger.debug("no signature for %s; assuming a default constructor", qualified_name_of(cls))
            return DEFAULT_CONSTRUCTOR
        required = sum(
            1
            for p in signature.parameters.values()
            if p.default is inspect.Parameter.empty
            and p.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        )
        return ConstructorInfo(parameter_count=required)

    @staticmethod
    def _location(obj: Any) -> SourceLocation | None:
        try:
            path = inspect.getsourcefile(obj)
            _, line = inspect.getsourcelines(obj)
        except (OSError, TypeError):
            return None
        return SourceLocation(path=Path(path) if path else None, line=line or None)
