"""
OpenTelemetry Tracing Setup
===========================
Configures distributed tracing for task and phase execution.

Spans are exported over OTLP/HTTP when ENABLE_TRACING=true; otherwise the
global no-op tracer is used and spans cost next to nothing.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

import atexit
import json
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional

from loguru import logger
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource, SERVICE_NAME

from taskchain.config import TRACING

# Use centralized config
SERVICE_NAME_VALUE = TRACING.SERVICE_NAME
OTLP_ENDPOINT = TRACING.OTLP_ENDPOINT
ENABLE_TRACING = TRACING.ENABLED

# Track provider for cleanup
_provider: Optional[TracerProvider] = None


def _cleanup_tracing() -> None:
    """Shutdown the tracer provider to flush pending spans."""
    global _provider
    if _provider is not None:
        try:
            _provider.shutdown()
        except Exception as e:
            logger.debug(f"Tracer provider shutdown failed: {e}")


def setup_tracing(service_name: str = SERVICE_NAME_VALUE) -> trace.Tracer:
    """
    Initialize OpenTelemetry tracing with OTLP export.

    Args:
        service_name: Name of the service for trace identification

    Returns:
        Configured tracer instance
    """
    global _provider

    resource = Resource.create({
        SERVICE_NAME: service_name,
    })

    _provider = TracerProvider(resource=resource)

    otlp_exporter = OTLPSpanExporter(
        endpoint=OTLP_ENDPOINT,
    )
    _provider.add_span_processor(BatchSpanProcessor(otlp_exporter))

    trace.set_tracer_provider(_provider)

    # Register cleanup on exit to flush pending spans
    atexit.register(_cleanup_tracing)

    return trace.get_tracer(service_name)



def safe_set_span_attributes(span: Any, attributes: Mapping[str, Any]) -> None:
    """Best-effort attribute setter.

    This helper is safe to call when tracing is disabled, when the active span is
    a no-op, or when values are not directly serializable.
    """

    if span is None:
        return

    setter = getattr(span, "set_attribute", None)
    if not callable(setter):
        return

    for key, value in attributes.items():
        if not isinstance(key, str) or not key:
            continue

        try:
            v = value
            if isinstance(v, str):
                setter(key, v[:2048])
                continue

            if isinstance(v, (bool, int, float)):
                setter(key, v)
                continue

            if v is None:
                continue

            if isinstance(v, (list, tuple)):
                # Keep sequences small and scalar.
                trimmed = list(v)[:25]
                if all(isinstance(x, (str, bool, int, float)) for x in trimmed):
                    setter(key, [x[:256] if isinstance(x, str) else x for x in trimmed])
                else:
                    setter(key, [str(x)[:256] for x in trimmed])
                continue

            if isinstance(v, dict):
                try:
                    setter(key, json.dumps(v, sort_keys=True)[:2048])
                except (TypeError, ValueError):
                    setter(key, str(v)[:2048])
                continue

            setter(key, str(v)[:2048])
        except Exception:
            # Never break task execution due to tracing.
            continue


@contextmanager
def task_span(name: str, attributes: Optional[Mapping[str, Any]] = None) -> Iterator[Any]:
    """Open a span on the task tracer and tag it with attributes.

    Exceptions raised inside the block are recorded on the span and re-raised.
    """
    tracer = init_tracing()
    with tracer.start_as_current_span(name) as span:
        if attributes:
            safe_set_span_attributes(span, attributes)
        yield span


_tracer = None


def init_tracing() -> trace.Tracer:
    """
    Initialize tracing if not already done.

    Returns:
        The global tracer instance (or NoOp tracer if disabled)
    """
    global _tracer
    if _tracer is None:
        if ENABLE_TRACING:
            _tracer = setup_tracing()
        else:
            _tracer = trace.get_tracer(SERVICE_NAME_VALUE)
    return _tracer
