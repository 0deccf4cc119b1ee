"""Registry exceptions"""
from .base import FactoryGenError


class RegistryError(FactoryGenError): ...


class RegistryStateError(RuntimeError, RegistryError): ...
