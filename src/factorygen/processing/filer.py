# factorygen/processing/filer.py
"""Writes generated modules into the output directory."""
from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from threading import RLock

from factorygen.exceptions import ArtifactWriteError
from factorygen.naming import is_dotted_identifier

logger = logging.getLogger(__name__)

__all__ = ["SourceFiler"]


class SourceFiler:
    """Create one source file per module name, atomically, at most once per pass."""

    def __init__(self, output_dir: str | Path, *, encoding: str = "utf-8") -> None:
        self.output_dir = Path(output_dir)
        self.encoding = encoding
        self._lock = RLock()
        self._written: dict[str, Path] = {}

    def path_for(self, module_name: str) -> Path:
        if not is_dotted_identifier(module_name):
            raise ArtifactWriteError(f"Invalid module name for generated source: {module_name!r}")
        return self.output_dir.joinpath(*module_name.split(".")).with_suffix(".py")

    def write(self, module_name: str, text: str) -> Path:
        """
        Write ``text`` as module ``module_name``.

        :raises ArtifactWriteError: the module was already written in this pass,
            or the file system refused the write. No partial file is left behind.
        """
        path = self.path_for(module_name)
        with self._lock:
            if module_name in self._written:
                raise ArtifactWriteError(
                    f"Attempt to recreate a file for module {module_name}: {path}", path=path
                )
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(prefix=f".{path.stem}.", suffix=".tmp", dir=path.parent)
                try:
                    with os.fdopen(fd, "w", encoding=self.encoding, newline="\n") as fh:
                        fh.write(text)
                    os.replace(tmp_name, path)
                except BaseException:
                    Path(tmp_name).unlink(missing_ok=True)
                    raise
            except OSError as exc:
                raise ArtifactWriteError(f"Could not write {path}: {exc}", path=path) from exc
            self._written[module_name] = path
        logger.info("wrote %s", path)
        return path

    @property
    def written(self) -> dict[str, Path]:
        with self._lock:
            return dict(self._written)

    def reset(self) -> None:
        with self._lock:
            self._written.clear()
