from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from ratelimit import limits, RateLimitException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from ..config import config
from ..utils.audit import audit_logger

# Multipart framing adds a little to the declared body size
MULTIPART_OVERHEAD_BYTES = 64 * 1024


@limits(calls=config.RATE_LIMIT_CALLS, period=config.RATE_LIMIT_PERIOD)
def check_rate_limit():
    pass


class SecurityMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, max_upload_size: int = None):
        super().__init__(app)
        self.max_upload_size = max_upload_size or config.max_upload_bytes()

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            check_rate_limit()

            # Content-Type validation
            content_type = request.headers.get("content-type", "")
            if request.method == "POST" and not self._is_valid_content_type(content_type):
                raise HTTPException(status_code=415, detail="Unsupported media type")

            # File size validation for uploads
            if "multipart/form-data" in content_type.lower():
                content_length = request.headers.get("content-length")
                if content_length and content_length.isdigit() \
                        and int(content_length) > self.max_upload_size + MULTIPART_OVERHEAD_BYTES:
                    raise HTTPException(status_code=413, detail="File too large")

        except RateLimitException:
            return self._reject(request, 429, "Too many requests")
        except HTTPException as exc:
            return self._reject(request, exc.status_code, exc.detail)

        response = await call_next(request)

        # Add security headers
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"
        return response

    def _reject(self, request: Request, status_code: int, detail: str) -> JSONResponse:
        audit_logger.log_rejected_request(status_code, detail, request.url.path, self._get_client_ip(request))
        return JSONResponse(
            status_code=status_code,
            content={"status": "error", "message": detail, "error_code": f"HTTP_{status_code}"}
        )

    def _is_valid_content_type(self, content_type: str) -> bool:
        """Validate allowed content types."""
        allowed_types = [
            "multipart/form-data",
        ]
        return any(allowed in content_type.lower() for allowed in allowed_types)

    def _get_client_ip(self, request: Request) -> str:
        """Get client IP address from request headers."""
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()
        return request.client.host if request.client else "unknown"
