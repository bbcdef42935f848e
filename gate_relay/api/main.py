"""
FastAPI application for the Gate Relay

Authenticates signed gate actions against the public key registry and relays
authorized commands to the gate controller.
"""
from fastapi import FastAPI, Request as FastAPIRequest, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
import logging
import re
import uuid

from gate_relay import __version__
from gate_relay.api.responses import failed_response
from gate_relay.api.routes import gate, public_keys, table
from gate_relay.core.config import configure_logging, get_settings
from gate_relay.core.database import get_db, init_db
from gate_relay.core.errors import ConfigurationError

logger = logging.getLogger(__name__)
error_logger = logging.getLogger("api.errors")


# Security Headers Middleware
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses"""
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["Cache-Control"] = "no-store"
        return response


# Create FastAPI app
app = FastAPI(
    title="Gate Relay API",
    description="Signed access-control command relay",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)


def _sanitize_error_message(message: str) -> str:
    """
    Scrub potential secrets from exception messages before logging.

    Covers database URLs with passwords, the gate HMAC secret and generic
    key/secret assignments.
    """
    sanitized = re.sub(
        r'(postgresql|postgres|mysql|sqlite)://[^:]+:[^@]+@',
        r'\1://[USER]:[REDACTED]@',
        message,
        flags=re.IGNORECASE
    )

    sensitive_patterns = [
        (r'(GATE_HMAC_KEY|DATABASE_URL)[=:\s]+[^\s,;]+', r'\1=[REDACTED]'),
        (r'(password|passwd|secret|token|key)["\']?\s*[=:]\s*["\']?[^"\'\s,;]+', r'\1=[REDACTED]'),
    ]
    for pattern, replacement in sensitive_patterns:
        sanitized = re.sub(pattern, replacement, sanitized, flags=re.IGNORECASE)

    return sanitized


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: FastAPIRequest, exc: StarletteHTTPException):
    """Render routing and guard errors (404, 405, 403) in the status envelope."""
    return failed_response(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: FastAPIRequest, exc: RequestValidationError):
    """Reject malformed bodies, including unknown gate actions."""
    logger.info(f"Rejected malformed request to {request.url.path}: {len(exc.errors())} error(s)")
    return failed_response(status.HTTP_400_BAD_REQUEST, "Invalid request")


@app.exception_handler(ConfigurationError)
async def configuration_exception_handler(request: FastAPIRequest, exc: ConfigurationError):
    """Fail closed: never sign or relay without the gate configuration."""
    error_logger.error(f"Refusing {request.method} {request.url.path}: {exc}")
    return failed_response(status.HTTP_503_SERVICE_UNAVAILABLE, "Service not configured")


# Global exception handler for safe error messages
@app.exception_handler(Exception)
async def global_exception_handler(request: FastAPIRequest, exc: Exception):
    """
    Log detailed errors internally but return a generic message to clients.
    """
    error_id = str(uuid.uuid4())
    sanitized_message = _sanitize_error_message(str(exc))

    error_logger.error(
        f"Error {error_id}: {type(exc).__name__}: {sanitized_message}",
        exc_info=True,
        extra={
            "error_id": error_id,
            "path": request.url.path,
            "method": request.method,
            "client": request.client.host if request.client else None
        }
    )

    return JSONResponse(
        status_code=500,
        content={
            "status": "failed",
            "message": "An internal error occurred",
            "error_id": error_id,
        }
    )


@app.on_event("startup")
async def startup_event():
    """Validate configuration and connect to the key registry"""
    settings = get_settings()
    configure_logging(settings)

    # No point serving requests that could never be relayed
    settings.require_gate_config()

    init_db(settings.database_url)
    logger.info(
        f"Gate relay started: environment={settings.environment} "
        f"window={settings.gate_command_window_seconds}s "
        f"timeout={settings.gate_dispatch_timeout_seconds}s"
    )


app.add_middleware(SecurityHeadersMiddleware)

# Include routers
app.include_router(gate.router)
app.include_router(public_keys.router)
app.include_router(table.router)


@app.get("/health")
async def health_check():
    """Health check endpoint (no auth required)"""
    from sqlalchemy import text

    health = {
        "status": "healthy",
        "version": __version__,
        "database": "unknown",
    }

    try:
        db = next(get_db())
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
        health["database"] = "connected"
    except Exception as e:
        logger.warning(f"Health check database error: {_sanitize_error_message(str(e))}")
        health["database"] = "disconnected"
        health["status"] = "degraded"

    return health


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=get_settings().api_port)
