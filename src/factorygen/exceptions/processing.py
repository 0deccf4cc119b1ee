# factorygen/exceptions/processing.py
"""Generator-time processing errors.

Every error carries the declaration it is anchored to (``None`` when the
failure is not attributable to a single declaration, e.g. artifact writes)
and a stable ``code`` naming the rule that was violated.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from .base import FactoryGenError

if TYPE_CHECKING:  # pragma: no cover
    from factorygen.metadata.model import Declaration

__all__ = [
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
]


class ProcessingError(FactoryGenError):
    """A failure reported against a declaration during a generation pass."""

    code: ClassVar[str] = "ProcessingError"

    def __init__(self, message: str, *, declaration: Declaration | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.declaration = declaration


class EmptyIdentifierError(ProcessingError):
    code = "EmptyIdentifier"


class UnresolvableGroupTypeError(ProcessingError):
    code = "UnresolvableGroupType"


class DuplicateIdentifierError(ProcessingError):
    """Raised when a group already holds a member with the same identifier."""

    code = "DuplicateIdentifier"

    def __init__(self, message: str, *, record: Any, existing: Any) -> None:
        super().__init__(message, declaration=record.declaration)
        self.record = record
        self.existing = existing


class ArtifactWriteError(ProcessingError):
    code = "ArtifactWriteFailure"

    def __init__(self, message: str, *, path: Any = None) -> None:
        super().__init__(message, declaration=None)
        self.path = path


# ----------------------------------------------------------------------------
# Structural validation
# ----------------------------------------------------------------------------
class ValidationError(ProcessingError):
    """Base for the structural rules checked by the record validator."""

    code = "ValidationError"


class NotAClassError(ValidationError):
    code = "NotAClass"


class NotPublicError(ValidationError):
    code = "NotPublic"


class IsAbstractError(ValidationError):
    code = "IsAbstract"


class DoesNotImplementError(ValidationError):
    code = "DoesNotImplement"


class DoesNotExtendError(ValidationError):
    code = "DoesNotExtend"


class MissingDefaultConstructorError(ValidationError):
    code = "MissingDefaultConstructor"
