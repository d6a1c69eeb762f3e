"""Structured logging, Prometheus metrics and optional Sentry/OTLP export."""

import logging
import time
import uuid

import sentry_sdk
import structlog
from fastapi import FastAPI, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from snaplink.core.config import Settings

REQUEST_ID_HEADER = "X-Request-ID"

REQUEST_COUNT = Counter(
    "http_requests_total",
    "HTTP requests handled",
    ["method", "endpoint", "status_code"],
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
)

REDIRECT_COUNT = Counter(
    "redirects_total",
    "Short code redirects served",
    ["status_code"],
)

SHORTURL_OPERATIONS = Counter(
    "shorturl_operations_total",
    "Short URLs created or deleted",
    ["operation"],
)


def normalize_endpoint(path: str) -> str:
    """Collapse path parameters into templates for metric labels."""
    if path.startswith("/api/shorturl/"):
        if path.endswith("/stats"):
            return "/api/shorturl/{code}/stats"
        return "/api/shorturl/{code}"
    if path.startswith("/api/") or path in ("/metrics", "/"):
        return path
    if path.count("/") == 1:
        return "/{code}"
    return "/{frontend_path}"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Tag each request with an ID, log its outcome and record its metrics.

    The ID comes from the X-Request-ID header when the caller sends one and
    is echoed back on the response.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started

        response.headers[REQUEST_ID_HEADER] = request_id
        structlog.get_logger().info(
            "Request completed",
            status_code=response.status_code,
            duration_ms=round(elapsed * 1000, 2),
        )

        endpoint = normalize_endpoint(request.url.path)
        REQUEST_COUNT.labels(request.method, endpoint, response.status_code).inc()
        REQUEST_LATENCY.labels(request.method, endpoint).observe(elapsed)
        return response


def configure_structlog(settings: Settings) -> None:
    """Route structlog through stdlib logging, JSON by default."""
    if settings.log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(
        format="%(message)s",
        level=logging.DEBUG if settings.debug else logging.INFO,
    )


def setup_tracing(app: FastAPI, settings: Settings) -> None:
    """Export spans over OTLP when an endpoint is configured."""
    if not settings.otlp_endpoint:
        return

    from opentelemetry import trace
    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
    from opentelemetry.sdk.resources import SERVICE_NAME, Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor

    provider = TracerProvider(resource=Resource(attributes={SERVICE_NAME: "snaplink"}))
    provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otlp_endpoint, insecure=True))
    )
    trace.set_tracer_provider(provider)
    FastAPIInstrumentor.instrument_app(app)
    structlog.get_logger().info("OTLP tracing enabled", otlp_endpoint=settings.otlp_endpoint)


def setup_sentry(settings: Settings) -> None:
    """Report unhandled errors to Sentry when a DSN is configured."""
    if not settings.sentry_dsn:
        return

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment="development" if settings.debug else "production",
        traces_sample_rate=0.1,
        send_default_pii=False,
    )
    structlog.get_logger().info("Sentry enabled")


def setup_observability(app: FastAPI, settings: Settings) -> None:
    """Configure logging and error reporting and expose `/metrics`."""
    configure_structlog(settings)
    setup_sentry(settings)
    setup_tracing(app, settings)

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


def record_redirect(status_code: int) -> None:
    REDIRECT_COUNT.labels(status_code=status_code).inc()


def record_shorturl_operation(operation: str) -> None:
    SHORTURL_OPERATIONS.labels(operation=operation).inc()
