"""Default loader: source-root walking and module autodiscovery."""

from __future__ import annotations

import glob
import importlib
import importlib.util
import logging
import os
import sys
from pathlib import Path
from typing import Iterable, List

from factorygen.naming import is_dotted_identifier

from .base import BaseLoader

logger = logging.getLogger(__name__)

_SKIP_DIRS = {"__pycache__", ".git", ".venv", "venv", ".tox", "node_modules"}


class SourceLoader(BaseLoader):
    def find_sources(self, roots: Iterable[str | Path]) -> list[tuple[str, Path]]:
        """Return ``(module_name, path)`` for every ``.py`` file under ``roots``.

        Order is deterministic (sorted per root, roots in the given order);
        a module name seen under an earlier root wins.
        """
        found: list[tuple[str, Path]] = []
        seen: set[str] = set()
        for root in roots:
            base = Path(root)
            if not base.is_dir():
                logger.warning("source root does not exist or is not a directory: %s", base)
                continue
            for path in sorted(base.rglob("*.py")):
                rel = path.relative_to(base)
                if any(part in _SKIP_DIRS or part.startswith(".") for part in rel.parts[:-1]):
                    continue
                module_name = self._module_name_from_path(str(path), str(base))
                if not module_name or module_name in seen or not is_dotted_identifier(module_name):
                    continue
                seen.add(module_name)
                found.append((module_name, path))
        logger.debug("found %d source modules under %s", len(found), list(map(str, roots)))
        return found

    def autodiscover(self, modules: Iterable[str]) -> List[str]:
        imported: list[str] = []
        for module in self._resolve_modules(modules):
            importlib.import_module(module)
            imported.append(module)
        return imported

    def _resolve_modules(self, modules: Iterable[str]) -> list[str]:
        resolved: list[str] = []
        for module in modules:
            if not module:
                continue
            if self._is_pattern(module):
                resolved.extend(self._expand_pattern(module))
            else:
                resolved.append(module)
        return self._dedupe(resolved)

    def _expand_pattern(self, pattern: str) -> list[str]:
        matches: list[str] = []
        module_path_pattern = pattern.replace(".", os.sep)
        for base in sys.path:
            if not base or not os.path.isdir(base):
                continue
            for suffix in ("", ".py", f"{os.sep}__init__.py"):
                glob_pattern = os.path.join(base, f"{module_path_pattern}{suffix}")
                for candidate in sorted(glob.glob(glob_pattern)):
                    module_name = self._module_name_from_path(candidate, base)
                    if not module_name or "__pycache__" in module_name:
                        continue
                    if importlib.util.find_spec(module_name) and module_name not in matches:
                        matches.append(module_name)
        return matches

    @staticmethod
    def _module_name_from_path(candidate: str, base_path: str) -> str | None:
        rel_path = os.path.relpath(candidate, base_path)
        if rel_path.startswith(os.pardir):
            return None

        rel_path = rel_path.replace(os.sep, ".")
        if rel_path == "__init__.py":
            return None
        for suffix in (".__init__.py", ".py"):
            if rel_path.endswith(suffix):
                rel_path = rel_path[: -len(suffix)]
                break

        rel_path = rel_path.rstrip(".")
        return rel_path or None

    @staticmethod
    def _dedupe(items: Iterable[str]) -> list[str]:
        seen: set[str] = set()
        ordered: list[str] = []
        for item in items:
            if item and item not in seen:
                seen.add(item)
                ordered.append(item)
        return ordered

    @staticmethod
    def _is_pattern(value: str) -> bool:
        return any(char in value for char in "*?[")
