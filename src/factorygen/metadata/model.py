# factorygen/metadata/model.py
"""Declaration metadata as supplied by a :class:`MetadataProvider`.

These are plain immutable values; providers build them, the processing
layer only reads them.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from factorygen.naming import QualifiedName, is_public_path

__all__ = [
    "DeclarationKind",
    "Modifier",
    "ConstructorInfo",
    "TypeReference",
    "UnevaluatedExpression",
    "FactoryAnnotation",
    "SourceLocation",
    "Declaration",
    "DEFAULT_CONSTRUCTOR",
    "ANNOTATION_ATTR",
    "get_annotation",
]


class DeclarationKind(str, Enum):
    CLASS = "class"
    INTERFACE = "interface"
    ENUM = "enum"
    FUNCTION = "function"


class Modifier(str, Enum):
    PUBLIC = "public"
    ABSTRACT = "abstract"


@dataclass(frozen=True, slots=True)
class ConstructorInfo:
    """Shape of one way to construct a class: required argument count + visibility."""

    parameter_count: int = 0
    modifiers: frozenset[Modifier] = frozenset({Modifier.PUBLIC})

    @property
    def is_public(self) -> bool:
        return Modifier.PUBLIC in self.modifiers

    @property
    def is_default(self) -> bool:
        """Public and callable without arguments."""
        return self.is_public and self.parameter_count == 0


DEFAULT_CONSTRUCTOR = ConstructorInfo()


@dataclass(frozen=True, slots=True)
class TypeReference:
    """An unresolved type name as written in source.

    ``module`` is the module the name was written in; providers resolve the
    name against that module's namespace (imports, local classes).
    """

    name: str
    module: str | None = None

    def __str__(self) -> str:  # pragma: no cover
        return self.name if self.module is None else f"{self.name} (in {self.module})"


@dataclass(frozen=True, slots=True)
class UnevaluatedExpression:
    """An annotation argument that is not a literal, kept as its source text."""

    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True, slots=True)
class FactoryAnnotation:
    """Raw field values of a ``@factory(...)`` marker.

    Values are kept as found: ``identifier`` may be missing or not a string,
    ``type`` may be a live class, a qualified-name string or a
    :class:`TypeReference`. Normalization happens in record extraction.
    """

    identifier: Any = None
    type: Any = None


@dataclass(frozen=True, slots=True)
class SourceLocation:
    path: Path | None = None
    line: int | None = None

    def __str__(self) -> str:
        if self.path is None:
            return "<unknown>"
        return f"{self.path}:{self.line}" if self.line else str(self.path)


@dataclass(frozen=True, slots=True)
class Declaration:
    """Metadata of one declaration (class, interface, enum or function)."""

    name: QualifiedName
    kind: DeclarationKind = DeclarationKind.CLASS
    modifiers: frozenset[Modifier] = frozenset({Modifier.PUBLIC})
    interfaces: tuple[str, ...] = ()
    superclass: str | None = None
    # Every direct non-interface base in declaration order; ``superclass`` is the first.
    bases: tuple[str, ...] = ()
    constructors: tuple[ConstructorInfo, ...] = (DEFAULT_CONSTRUCTOR,)
    annotation: FactoryAnnotation | None = None
    location: SourceLocation | None = field(default=None, compare=False)

    @property
    def qualified_name(self) -> str:
        return self.name.as_str

    @property
    def simple_name(self) -> str:
        return self.name.simple_name

    @property
    def is_public(self) -> bool:
        return Modifier.PUBLIC in self.modifiers

    @property
    def is_abstract(self) -> bool:
        return Modifier.ABSTRACT in self.modifiers

    @property
    def superclasses(self) -> tuple[str, ...]:
        if self.bases:
            return self.bases
        return (self.superclass,) if self.superclass else ()

    @classmethod
    def create(
        cls,
        module: str,
        qualname: str,
        *,
        kind: DeclarationKind = DeclarationKind.CLASS,
        public: bool | None = None,
        abstract: bool = False,
        interfaces: tuple[str, ...] = (),
        superclass: str | None = None,
        bases: tuple[str, ...] = (),
        constructors: tuple[ConstructorInfo, ...] = (DEFAULT_CONSTRUCTOR,),
        annotation: FactoryAnnotation | None = None,
        location: SourceLocation | None = None,
    ) -> Declaration:
        """Convenience constructor deriving modifiers from flags.

        Visibility defaults to the naming convention (no ``_`` segment).
        """
        if public is None:
            public = is_public_path(qualname)
        mods = set()
        if public:
            mods.add(Modifier.PUBLIC)
        if abstract:
            mods.add(Modifier.ABSTRACT)
        return cls(
            name=QualifiedName(module=module, qualname=qualname),
            kind=kind,
            modifiers=frozenset(mods),
            interfaces=tuple(interfaces),
            superclass=superclass if superclass is not None else next(iter(bases), None),
            bases=tuple(bases),
            constructors=tuple(constructors),
            annotation=annotation,
            location=location,
        )


ANNOTATION_ATTR = "__factory__"


def get_annotation(obj: Any, attribute: str = ANNOTATION_ATTR) -> FactoryAnnotation | None:
    """Return the annotation declared directly on ``obj`` (never inherited)."""
    try:
        value = vars(obj).get(attribute)
    except TypeError:
        return None
    return value if isinstance(value, FactoryAnnotation) else None
