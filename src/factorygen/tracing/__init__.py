# factorygen/tracing/__init__.py
from .tracing import SpanPath, get_tracer, trace_span

__all__ = [
    "get_tracer",
    "trace_span",
    "SpanPath",
]
