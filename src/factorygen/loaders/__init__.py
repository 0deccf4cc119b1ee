from .base import BaseLoader
from .default import SourceLoader

__all__ = ["BaseLoader", "SourceLoader"]
