"""Generator settings: runtime overrides over a settings module over defaults.

Lookups fall through three layers, first hit wins::

    overrides   values set on the instance or passed to ``update_from_mapping``
    module      the settings module named by ``FACTORYGEN_CONFIG_MODULE``
    defaults    :data:`factorygen.conf.defaults.DEFAULTS` (never mutated)

Only UPPER_CASE names are read from modules and mappings. With a
``namespace`` (``"FACTORYGEN"``) only ``FACTORYGEN_*`` names are read and the
prefix is dropped, so a project-wide settings module can host them.
"""
from __future__ import annotations

import importlib
import logging
import os
from collections import ChainMap
from types import ModuleType
from typing import Any, Iterator, Mapping, MutableMapping

from factorygen.exceptions import ConfigurationError

from .defaults import DEFAULTS

logger = logging.getLogger(__name__)

CONFIG_ENVVAR = "FACTORYGEN_CONFIG_MODULE"

__all__ = ["CONFIG_ENVVAR", "Settings"]


class Settings(MutableMapping[str, Any]):
    """Layered generator settings; see the module docstring for precedence."""

    def __init__(self, *overrides: Mapping[str, Any]) -> None:
        self._overrides: dict[str, Any] = {}
        self._module: dict[str, Any] = {}
        self._layers = ChainMap(self._overrides, self._module, dict(DEFAULTS))
        for layer in overrides:
            self._overrides.update(layer)

    @classmethod
    def from_environment(cls, overrides: Mapping[str, Any] | None = None) -> Settings:
        """Defaults, then the env-named settings module, then ``overrides``."""
        settings = cls()
        settings.update_from_envvar()
        if overrides:
            settings.update_from_mapping(overrides)
        return settings

    def __getitem__(self, key: str) -> Any:
        return self._layers[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._overrides[key] = value

    def __delitem__(self, key: str) -> None:
        # Drops the override only; the module or default value shows through again.
        del self._overrides[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._layers)

    def __len__(self) -> int:
        return len(self._layers)

    def origin(self, key: str) -> str:
        """Which layer ``key`` is read from: ``override``, ``module`` or ``default``."""
        for label, layer in zip(("override", "module", "default"), self._layers.maps):
            if key in layer:
                return label
        raise KeyError(key)

    def update_from_object(self, obj: str | ModuleType | object, *, namespace: str | None = None) -> None:
        """Load a settings module (or any object with attributes) into the module layer."""
        if isinstance(obj, str):
            try:
                obj = importlib.import_module(obj)
            except ImportError as exc:
                raise ConfigurationError(f"Cannot import settings module {obj!r}: {exc}") from exc
        values = _select(vars(obj), namespace)
        self._module.update(values)
        logger.debug("loaded %d setting(s) from %s", len(values), getattr(obj, "__name__", obj))

    def update_from_envvar(self, envvar: str = CONFIG_ENVVAR, *, namespace: str | None = None) -> None:
        module_name = os.environ.get(envvar, "").strip()
        if module_name:
            self.update_from_object(module_name, namespace=namespace)

    def update_from_mapping(self, mapping: Mapping[str, Any], *, namespace: str | None = None) -> None:
        self._overrides.update(_select(mapping, namespace))

    def as_dict(self) -> dict[str, Any]:
        return dict(self._layers)


def _select(values: Mapping[str, Any], namespace: str | None) -> dict[str, Any]:
    if namespace is None:
        return {key: value for key, value in values.items() if key.isupper()}
    prefix = f"{namespace}_"
    return {key[len(prefix):]: value for key, value in values.items() if key.startswith(prefix) and key.isupper()}
