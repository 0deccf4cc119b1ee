# factorygen/naming.py
from __future__ import annotations

import keyword
import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

__all__ = [
    "QualifiedName",
    "snake_case",
    "simple_name",
    "is_dotted_identifier",
    "is_public_path",
]


# -----------------------------------------------------------------------------
# Validation constraints (single source of truth)
# -----------------------------------------------------------------------------

_SEGMENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_CAMEL_1 = re.compile(r"(.)([A-Z][a-z]+)")
_CAMEL_2 = re.compile(r"([a-z0-9])([A-Z])")


def _validate_path(value: str, field: str) -> str:
    """
    Validate a dotted Python path (module or qualname).

    Rules:
    - must be a string
    - trimmed value cannot be empty
    - every dot-separated segment must be a valid, non-keyword identifier

    Returns the trimmed value on success, raises ValueError on failure.
    """
    if not isinstance(value, str):
        raise ValueError(f"{field} must be a string (got {type(value)!r})")
    s = value.strip()
    if not s:
        raise ValueError(f"{field} cannot be empty")
    if not is_dotted_identifier(s):
        raise ValueError(f"{field} is not a dotted identifier: {value!r}")
    return s


def is_dotted_identifier(value: str) -> bool:
    parts = value.split(".")
    return all(_SEGMENT_RE.match(p) and not keyword.iskeyword(p) for p in parts)


def is_public_path(value: str) -> bool:
    """True when no segment of ``value`` is underscore-prefixed."""
    return all(p and not p.startswith("_") for p in value.split("."))


def simple_name(qualified_name: str) -> str:
    return qualified_name.rpartition(".")[2]


def snake_case(name: str) -> str:
    """``DrinkFactory`` -> ``drink_factory``; ``HTTPClient`` -> ``http_client``."""
    s = _CAMEL_1.sub(r"\1_\2", name)
    return _CAMEL_2.sub(r"\1_\2", s).lower()


# -----------------------------------------------------------------------------
# QualifiedName (Value Object)
# -----------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class QualifiedName:
    """
    Immutable, validated location of a class: defining module + ``__qualname__``.

    Canonical string: "module.qualname" (e.g. ``pizzastore.drinks.drink.Drink``).
    The split is kept explicitly because a dotted string alone cannot tell a
    nested class apart from a submodule.
    """

    module: str
    qualname: str

    def __post_init__(self) -> None:
        _validate_path(self.module, "module")
        _validate_path(self.qualname, "qualname")

    @property
    def as_str(self) -> str:
        return f"{self.module}.{self.qualname}"

    @property
    def simple_name(self) -> str:
        return simple_name(self.qualname)

    @property
    def top_level(self) -> str:
        """Module-level name that must be imported to reach this class."""
        return self.qualname.partition(".")[0]

    @property
    def package(self) -> str:
        return self.module.rpartition(".")[0]

    def __str__(self) -> str:  # pragma: no cover
        return self.as_str

    # ------------------- Constructors -------------------
    @classmethod
    def of(cls, obj: type) -> QualifiedName:
        """Build from a live class object."""
        return cls(module=obj.__module__, qualname=obj.__qualname__)

    @classmethod
    def try_of(cls, obj: object) -> QualifiedName | None:
        """Best-effort; ``None`` for local classes and other non-importable objects."""
        module = getattr(obj, "__module__", None)
        qualname = getattr(obj, "__qualname__", None)
        if not isinstance(module, str) or not isinstance(qualname, str) or "<locals>" in qualname:
            return None
        try:
            return cls(module=module, qualname=qualname)
        except ValueError:
            logger.debug("not a qualified class path: %s.%s", module, qualname)
            return None
