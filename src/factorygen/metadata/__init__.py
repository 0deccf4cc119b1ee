"""Declaration metadata and the providers that supply it."""

from .model import (
    ANNOTATION_ATTR,
    DEFAULT_CONSTRUCTOR,
    ConstructorInfo,
    Declaration,
    DeclarationKind,
    FactoryAnnotation,
    Modifier,
    SourceLocation,
    TypeReference,
    UnevaluatedExpression,
    get_annotation,
)
from .protocols import MetadataProvider
from .reflection import ReflectionMetadataProvider, qualified_name_of
from .simple import SimpleMetadataProvider
from .source import SourceMetadataProvider

__all__ = [
    # Model
    "ANNOTATION_ATTR", "DEFAULT_CONSTRUCTOR", "ConstructorInfo", "Declaration",
    "DeclarationKind", "FactoryAnnotation", "Modifier", "SourceLocation", "TypeReference",
    "UnevaluatedExpression", "get_annotation", "qualified_name_of",
    # Providers
    "MetadataProvider", "SimpleMetadataProvider", "SourceMetadataProvider",
    "ReflectionMetadataProvider",
]
