"""FastAPI Application Entry Point."""

import logging
import os

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from chirpy.api.routes import admin_router, api_router
from chirpy.core.config import settings
from chirpy.core.exceptions import AuthError
from chirpy.core.rate_limit import limiter

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = structlog.get_logger(__name__)

# Initialize Sentry for error tracking
# IMPORTANT: Must be done BEFORE creating FastAPI app
if settings.SENTRY_DSN:
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        send_default_pii=False,  # Never ship Authorization headers or emails
        release=f"chirpy@{os.getenv('GIT_COMMIT', 'dev')}",
    )
    logger.info("sentry.initialized", environment=settings.SENTRY_ENVIRONMENT)
else:
    logger.info("sentry.disabled")

# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="Chirpy - short messages behind token authentication",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

# Configure rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """
    Map auth failures to uniform responses.

    The concrete failure kind was logged where it was raised; clients only
    ever see the public detail of its class.
    """
    headers = {"WWW-Authenticate": exc.www_authenticate} if exc.www_authenticate else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=headers,
    )


@app.get(f"{settings.API_PREFIX}/healthz", tags=["health"])
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(
        status_code=200,
        content={
            "status": "healthy",
            "service": settings.APP_NAME,
            "environment": settings.APP_ENV,
        },
    )


app.include_router(api_router, prefix=settings.API_PREFIX)
app.include_router(admin_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "chirpy.main:app",
        host="0.0.0.0",
        port=8080,
        reload=settings.DEBUG,
    )
