import logging
from collections.abc import Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

from opentelemetry import trace
from opentelemetry.trace import Span, SpanKind, Status, StatusCode, Tracer

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Tracer utilities
# ---------------------------------------------------------------------------

_DEFAULT_TRACER_NAME = "factorygen"
_ALLOWED = (bool, str, bytes, int, float)


@dataclass(frozen=True)
class SpanPath:
    """Structured span name helper.

    Example:
        root = SpanPath.from_str("factorygen.emit")
        child = root.child("DrinkFactory")
        str(child) -> "factorygen.emit.DrinkFactory"
    """

    parts: tuple[str, ...]

    def __str__(self) -> str:
        return ".".join(self.parts)

    @classmethod
    def from_str(cls, name: str) -> "SpanPath":
        name = (name or "").strip()
        if not name:
            return cls(())
        return cls(tuple(p for p in name.split(".") if p))

    def child(self, *segments: str) -> "SpanPath":
        """Return a new SpanPath with additional segments appended.

        Empty/falsey segments are ignored.
        """
        cleaned = tuple(s for s in segments if s)
        return SpanPath(self.parts + cleaned)


def get_tracer(name: str | None = None) -> Tracer:
    """Return an OpenTelemetry tracer for this package."""
    return trace.get_tracer(name or _DEFAULT_TRACER_NAME)


def _apply_attributes(span: Span, attrs: Mapping[str, Any] | None) -> None:
    if not attrs:
        return
    # OpenTelemetry allows only: bool, str, bytes, int, float, or sequences of those.
    for k, v in attrs.items():
        if v is None:
            continue
        if isinstance(v, _ALLOWED):
            span.set_attribute(k, v)
        elif isinstance(v, Sequence) and not isinstance(v, (str, bytes)):
            cleaned = [x for x in v if isinstance(x, _ALLOWED)]
            if cleaned:
                span.set_attribute(k, cleaned)
        else:
            logger.debug("trace.attr.skipped", extra={"key": k})


def _record_exception(span: Span, err: BaseException) -> None:
    span.record_exception(err)
    span.set_status(Status(StatusCode.ERROR, description=str(err)))
    span.set_attribute("exception.type", type(err).__name__)
    span.set_attribute("exception.msg", str(err)[:500])


# ---------------------------------------------------------------------------
# Context managers for spans
# ---------------------------------------------------------------------------

@contextmanager
def trace_span(name: str | SpanPath, *, attributes: Mapping[str, Any] | None = None) -> Iterator[Span]:
    """Synchronous span context for generator phases.

    Usage:
        with trace_span("factorygen.process", attributes={"factorygen.round": 1}):
            ...
    """
    tracer = get_tracer()
    span_name = str(name) if isinstance(name, SpanPath) else name
    with tracer.start_as_current_span(span_name, kind=SpanKind.INTERNAL) as span:
        _apply_attributes(span, attributes)
        try:
            yield span
            span.set_attribute("ok", True)
        except Exception as e:
            span.set_attribute("ok", False)
            _record_exception(span, e)
            raise


__all__ = [
    "SpanPath",
    "get_tracer",
    "trace_span",
]
