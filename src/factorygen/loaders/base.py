"""Loader interfaces used for source and module discovery."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable


class BaseLoader:
    """Base loader responsible for locating source files and importing modules."""

    def find_sources(self, roots: Iterable[str | Path]) -> list[tuple[str, Path]]:
        raise NotImplementedError

    def autodiscover(self, modules: Iterable[str]) -> list[str]:
        raise NotImplementedError
