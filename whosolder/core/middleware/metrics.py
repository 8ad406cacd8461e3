from starlette.middleware.base import BaseHTTPMiddleware

from whosolder.core.metrics import http_requests_total

UNMATCHED_PATH = "unmatched"


def route_template(request) -> str:
    """
    Path label for a request: the matched route's template, never the raw URL.

    Unknown URLs share one series so scanners cannot grow the label set.
    """
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_PATH


class MetricsMiddleware(BaseHTTPMiddleware):
    """Count every response by method, route template and status."""

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        try:
            http_requests_total.inc(labels={
                "method": request.method.upper(),
                "path": route_template(request),
                "status": str(response.status_code),
            })
        except ValueError:
            # Never fail a request over a metric
            pass
        return response
