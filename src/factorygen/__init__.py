"""
factorygen: generate identifier-dispatching factory classes from ``@factory``
markers.

    from factorygen import factory

    @factory(identifier="Coffee", type=Drink)
    class Coffee(Drink): ...

    result = factorygen.generate(["src"])
"""

from .decorators import factory
from .exceptions import ConfigurationError, FactoryGenError, ProcessingError
from .processing import FactoryProcessor, PassResult, generate, generate_from_modules
from .runtime import UnknownIdentifierError

__version__ = "0.1.0"

__all__ = [
    "factory",
    "generate",
    "generate_from_modules",
    "FactoryProcessor",
    "PassResult",
    "FactoryGenError",
    "ConfigurationError",
    "ProcessingError",
    "UnknownIdentifierError",
]
