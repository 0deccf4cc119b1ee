from factorygen.metadata.model import ANNOTATION_ATTR, get_annotation

from .base import FactoryDecorator

factory = FactoryDecorator()

__all__ = [
    "ANNOTATION_ATTR",
    "FactoryDecorator",
    "factory",
    "get_annotation",
]
