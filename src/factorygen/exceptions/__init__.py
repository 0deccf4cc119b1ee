from .base import ConfigurationError, FactoryGenError
from .processing import (
    ArtifactWriteError,
    DoesNotExtendError,
    DoesNotImplementError,
    DuplicateIdentifierError,
    EmptyIdentifierError,
    IsAbstractError,
    MissingDefaultConstructorError,
    NotAClassError,
    NotPublicError,
    ProcessingError,
    UnresolvableGroupTypeError,
    ValidationError,
)
from .registry import RegistryError, RegistryStateError

__all__ = [
    "FactoryGenError",
    "ConfigurationError",
    "ProcessingError",
    "EmptyIdentifierError",
    "UnresolvableGroupTypeError",
    "DuplicateIdentifierError",
    "ArtifactWriteError",
    "ValidationError",
    "NotAClassError",
    "NotPublicError",
    "IsAbstractError",
    "DoesNotImplementError",
    "DoesNotExtendError",
    "MissingDefaultConstructorError",
    "RegistryError",
    "RegistryStateError",
]
