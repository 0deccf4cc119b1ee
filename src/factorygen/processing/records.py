"""Annotated records: the validated-to-be unit of a generation pass.

A record is extracted from one annotated declaration. Extraction normalizes
the annotation's ``type`` field into a canonical qualified name through one of
two paths:

- direct: the field holds a live class (runtime metadata);
- indirect: the field holds an unresolved :class:`TypeReference` (static
  metadata, or a string given to the decorator) that the provider resolves in
  the context of the module it was written in.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any

from factorygen.exceptions import EmptyIdentifierError, ProcessingError, UnresolvableGroupTypeError
from factorygen.metadata import Declaration, MetadataProvider, TypeReference, UnevaluatedExpression, qualified_name_of
from factorygen.naming import simple_name

logger = logging.getLogger(__name__)

__all__ = ["AnnotatedRecord", "resolve_group_type"]


@dataclass(frozen=True, slots=True)
class AnnotatedRecord:
    """Immutable payload extracted from one ``@factory`` declaration."""

    identifier: str
    group: str
    declaration: Declaration = field(compare=False, repr=False)

    @property
    def qualified_name(self) -> str:
        return self.declaration.qualified_name

    @property
    def group_simple_name(self) -> str:
        return simple_name(self.group)

    @classmethod
    def from_declaration(cls, declaration: Declaration, provider: MetadataProvider) -> AnnotatedRecord:
        """
        Build a record from an annotated declaration.

        :raises EmptyIdentifierError: identifier missing, not a string or blank.
        :raises UnresolvableGroupTypeError: ``type`` does not name a known declaration,
            or the provider failed while resolving it.
        """
        annotation = declaration.annotation
        if annotation is None:
            raise ValueError(f"{declaration.qualified_name} does not carry a @factory annotation")

        identifier = annotation.identifier
        owner = declaration.qualified_name
        if isinstance(identifier, UnevaluatedExpression):
            raise EmptyIdentifierError(
                f"identifier in @factory for class {owner} must be a string literal, got `{identifier.text}`",
                declaration=declaration,
            )
        if identifier is not None and not isinstance(identifier, str):
            raise EmptyIdentifierError(
                f"identifier in @factory for class {owner} must be a string, got {identifier!r}",
                declaration=declaration,
            )
        if identifier is None or not identifier.strip():
            raise EmptyIdentifierError(
                f"identifier in @factory for class {owner} must not be empty",
                declaration=declaration,
            )

        group = resolve_group_type(annotation.type, provider, declaration=declaration)
        logger.debug("extracted record %r -> %s (group %s)", identifier, declaration.qualified_name, group)
        return cls(identifier=identifier, group=group, declaration=declaration)


def resolve_group_type(value: Any, provider: MetadataProvider, *, declaration: Declaration | None = None) -> str:
    """Normalize an annotation ``type`` value to the group's canonical qualified name."""
    context = declaration.name.module if declaration is not None else None
    owner = declaration.qualified_name if declaration is not None else "<unknown>"

    try:
        if inspect.isclass(value):
            name: str | None = qualified_name_of(value)
        elif isinstance(value, TypeReference):
            name = provider.resolve_reference(value)
        elif isinstance(value, str) and value.strip():
            name = provider.resolve_reference(TypeReference(name=value.strip(), module=context))
        else:
            name = None

        group = provider.get_declaration(name) if name else None
    except ProcessingError:
        raise
    except Exception as exc:
        raise UnresolvableGroupTypeError(
            f"type in @factory for class {owner} cannot be resolved: {_describe(value)} "
            f"({type(exc).__name__}: {exc})",
            declaration=declaration,
        ) from exc

    if group is None:
        raise UnresolvableGroupTypeError(
            f"type in @factory for class {owner} cannot be resolved: {_describe(value)}",
            declaration=declaration,
        )
    return group.qualified_name


def _describe(value: Any) -> str:
    if value is None:
        return "no type given"
    if isinstance(value, TypeReference):
        return repr(value.name)
    if inspect.isclass(value):
        return qualified_name_of(value)
    return repr(value)
