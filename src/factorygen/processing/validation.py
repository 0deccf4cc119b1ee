# factorygen/processing/validation.py
"""Structural rules for ``@factory`` declarations.

Rules run in a fixed order and stop at the first failure:

1. the declaration is a concrete class (not an interface, enum or function);
2. it is public;
3. it is not abstract;
4. it satisfies the group type: an interface group must be among the class's
   *direct* interfaces; a class group must be an ancestor through any of the
   non-interface bases (mixins included);
5. it has a public constructor callable without arguments.
"""
from __future__ import annotations

import logging
from typing import Callable

from factorygen.exceptions import (
    DoesNotExtendError,
    DoesNotImplementError,
    IsAbstractError,
    MissingDefaultConstructorError,
    NotAClassError,
    NotPublicError,
    UnresolvableGroupTypeError,
)
from factorygen.metadata import DeclarationKind, MetadataProvider

from .records import AnnotatedRecord

logger = logging.getLogger(__name__)

__all__ = ["RecordValidator", "DEFAULT_MAX_SUPERCLASS_DEPTH"]

DEFAULT_MAX_SUPERCLASS_DEPTH = 64


class RecordValidator:
    """Check one :class:`AnnotatedRecord` against the structural rules."""

    annotation_label = "@factory"

    def __init__(self, provider: MetadataProvider, *, max_superclass_depth: int = DEFAULT_MAX_SUPERCLASS_DEPTH) -> None:
        if max_superclass_depth < 1:
            raise ValueError("max_superclass_depth must be >= 1")
        self.provider = provider
        self.max_superclass_depth = max_superclass_depth

    @property
    def rules(self) -> tuple[Callable[[AnnotatedRecord], None], ...]:
        return (
            self.check_kind,
            self.check_public,
            self.check_not_abstract,
            self.check_subtype,
            self.check_default_constructor,
        )

    def validate(self, record: AnnotatedRecord) -> None:
        """
        Run every rule in order.

        :raises ValidationError: the first rule violation (a subclass naming the rule).
        """
        for rule in self.rules:
            rule(record)
        logger.debug("record %r (%s) is valid", record.identifier, record.qualified_name)

    # --- rules ---

    def check_kind(self, record: AnnotatedRecord) -> None:
        declaration = record.declaration
        if declaration.kind is not DeclarationKind.CLASS:
            raise NotAClassError(
                f"Only classes can be annotated with {self.annotation_label}; "
                f"{declaration.qualified_name} is a {declaration.kind.value}",
                declaration=declaration,
            )

    def check_public(self, record: AnnotatedRecord) -> None:
        declaration = record.declaration
        if not declaration.is_public:
            raise NotPublicError(
                f"The class {declaration.qualified_name} is not public.",
                declaration=declaration,
            )

    def check_not_abstract(self, record: AnnotatedRecord) -> None:
        declaration = record.declaration
        if declaration.is_abstract:
            raise IsAbstractError(
                f"The class {declaration.qualified_name} is abstract. "
                f"You can't annotate abstract classes with {self.annotation_label}",
                declaration=declaration,
            )

    def check_subtype(self, record: AnnotatedRecord) -> None:
        declaration = record.declaration
        group = self.provider.get_declaration(record.group)
        if group is None:
            raise UnresolvableGroupTypeError(
                f"The group type {record.group} of class {declaration.qualified_name} cannot be resolved",
                declaration=declaration,
            )

        if group.kind is DeclarationKind.INTERFACE:
            if record.group not in declaration.interfaces:
                raise DoesNotImplementError(
                    f"The class {declaration.qualified_name} annotated with {self.annotation_label} "
                    f"must implement the interface {record.group}",
                    declaration=declaration,
                )
            return

        self._walk_superclasses(record)

    def _walk_superclasses(self, record: AnnotatedRecord) -> None:
        declaration = record.declaration
        # Depth-first over every non-interface base, leftmost first.
        stack = [(base, 1, (declaration.qualified_name,)) for base in reversed(declaration.superclasses)]
        visited: set[str] = set()
        truncated = False

        while stack:
            current, depth, path = stack.pop()
            if current == record.group:
                return
            if current in path or depth > self.max_superclass_depth:
                truncated = True
                continue
            if current in visited:
                continue
            visited.add(current)

            parent = self.provider.get_declaration(current)
            if parent is None:
                logger.debug("superclass chain of %s leaves known declarations at %s", declaration.qualified_name, current)
                continue
            stack.extend((base, depth + 1, path + (current,)) for base in reversed(parent.superclasses))

        detail = ""
        if truncated:
            detail = f" (superclass chain is cyclic or deeper than {self.max_superclass_depth})"
        raise DoesNotExtendError(
            f"The class {declaration.qualified_name} annotated with {self.annotation_label} "
            f"must inherit from {record.group}{detail}",
            declaration=declaration,
        )

    def check_default_constructor(self, record: AnnotatedRecord) -> None:
        declaration = record.declaration
        if any(ctor.is_default for ctor in declaration.constructors):
            return
        raise MissingDefaultConstructorError(
            f"The class {declaration.qualified_name} must provide a public constructor callable without arguments",
            declaration=declaration,
        )
