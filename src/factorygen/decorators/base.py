# factorygen/decorators/base.py


"""
Factory marker decorator (class-based).

This module defines `FactoryDecorator`, a callable class producing the
`@factory(identifier=..., type=...)` marker. The marker only *records* its
field values on the decorated object; every rule (visibility, subtype,
constructor shape, identifier uniqueness) is checked at generation time by
`factorygen.processing`.

Usage
-----
    @factory(identifier="Coffee", type=Drink)
    class Coffee(Drink): ...

    @factory("Margherita", "pizzastore.meals.meal.Meal")
    class Margherita(Meal): ...

Key behaviors
-------------
- Both fields are required; bare `@factory` raises `TypeError`.
- The annotation is pinned under `__factory__` as a `FactoryAnnotation`.
  Discovery reads it from the object's own `__dict__`, so subclasses of an
  annotated class are not annotated themselves.
- A string `type` is kept as a `TypeReference` anchored at the decorated
  object's module, to be resolved by the metadata provider.
"""

import inspect
import logging
from typing import Any, Callable, TypeVar

from factorygen.metadata.model import ANNOTATION_ATTR, FactoryAnnotation, TypeReference
from factorygen.tracing import trace_span

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FactoryDecorator:
    """Class-based decorator pinning a :class:`FactoryAnnotation` to a class.

    Subclasses may override:
      • ``pin(self, obj, annotation) -> None``
    """

    attribute: str = ANNOTATION_ATTR
    log_category: str = "factory"

    def __call__(self, identifier: Any = None, type: Any = None) -> Callable[[T], T]:
        if type is None and (inspect.isclass(identifier) or inspect.isfunction(identifier)):
            raise TypeError("@factory requires arguments: use @factory(identifier=..., type=...)")

        def _apply(obj: T) -> T:
            annotation = FactoryAnnotation(
                identifier=identifier,
                type=self._coerce_type(type, obj),
            )
            self.pin(obj, annotation)

            fqcn = f"{getattr(obj, '__module__', '?')}.{getattr(obj, '__qualname__', obj)}"
            with trace_span(
                f"factorygen.decorator.apply ({getattr(obj, '__name__', obj)})",
                attributes={
                    "factorygen.decorator": self.__class__.__name__,
                    "factorygen.class": fqcn,
                    "factorygen.identifier": identifier if isinstance(identifier, str) else None,
                },
            ):
                label = str(self.log_category).upper()
                logger.info("[%s] ✅ discovered `%s` (identifier=%r)", label, fqcn, identifier)
            return obj

        return _apply

    # ---------------- hooks / extension points ----------------
    def pin(self, obj: Any, annotation: FactoryAnnotation) -> None:
        setattr(obj, self.attribute, annotation)

    @staticmethod
    def _coerce_type(value: Any, obj: Any) -> Any:
        if isinstance(value, str):
            return TypeReference(name=value.strip(), module=getattr(obj, "__module__", None))
        return value

