import logging
import time

logger = logging.getLogger("records.requests")


class RequestLoggingMiddleware:
    """Log one line per API request with its status and duration."""
    PREFIXES = ('/api/',)

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        path = request.path or ''
        if not any(path.startswith(p) for p in self.PREFIXES):
            return self.get_response(request)
        started = time.monotonic()
        response = self.get_response(request)
        elapsed_ms = (time.monotonic() - started) * 1000
        logger.info(
            "method=%s path=%s status=%s duration_ms=%.1f",
            request.method, path, response.status_code, elapsed_ms,
        )
        return response
