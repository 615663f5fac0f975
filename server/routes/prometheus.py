import time
from fastapi import APIRouter, Request, Response
from starlette.routing import Match
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest

router = APIRouter()

REQUEST_COUNT = Counter(
    "http_requests_total",
    "HTTP requests by method, route and status",
    ["method", "endpoint", "http_status"]
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "Time spent handling a request",
    ["endpoint"]
)

EXCEPTION_COUNT = Counter(
    "http_exceptions_total",
    "Requests that ended in an unhandled exception",
    ["endpoint"]
)

IN_PROGRESS = Gauge(
    "http_requests_in_progress",
    "Requests currently being handled"
)


def _endpoint_label(request: Request) -> str:
    # Full route template ("/tasks/{task_id}") keeps task ids out of label values.
    # scope["route"] is the inner APIRoute, whose path lacks the router prefix.
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return route.path
    return request.url.path


@router.get("/")
def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


async def metrics_middleware(request: Request, call_next):
    started = time.perf_counter()
    IN_PROGRESS.inc()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    except Exception:
        EXCEPTION_COUNT.labels(endpoint=_endpoint_label(request)).inc()
        raise
    finally:
        IN_PROGRESS.dec()
        endpoint = _endpoint_label(request)
        REQUEST_LATENCY.labels(endpoint=endpoint).observe(time.perf_counter() - started)
        REQUEST_COUNT.labels(method=request.method, endpoint=endpoint, http_status=status_code).inc()
