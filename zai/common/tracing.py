"""Tracing helpers built on the OpenTelemetry API.

Spans are no-ops unless the host application installs an SDK tracer
provider.
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode


def get_tracer(name: str):
    """Get a tracer instance."""
    return trace.get_tracer(name)


@contextmanager
def traced_span(name: str, attributes: Optional[Dict[str, Any]] = None) -> Iterator[Span]:
    """Run a block inside a span, recording exceptions on it."""
    tracer = get_tracer("zai")
    with tracer.start_as_current_span(name, record_exception=False) as span:
        for key, value in (attributes or {}).items():
            if value is not None:
                span.set_attribute(key, value)
        try:
            yield span
        except Exception as exc:
            span.record_exception(exc)
            span.set_status(Status(StatusCode.ERROR, str(exc)))
            raise
        else:
            span.set_status(Status(StatusCode.OK))


def set_status_code(span: Span, status_code: int) -> None:
    """Annotate a span with the HTTP response status."""
    span.set_attribute("http.status_code", status_code)
