"""Main entry point for the Moments admin service."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from moments_admin.api.v1 import (
    audit_router,
    auth_router,
    dashboard_router,
    reports_router,
    users_router,
    waitlist_router,
)
from moments_admin.api.v1.dependencies import GateRedirect
from moments_admin.core.settings import settings

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Operator console for the Moments waitlist, reports and user trust flags",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Include API routers
app.include_router(auth_router, prefix="/api/v1")
app.include_router(dashboard_router, prefix="/api/v1")
app.include_router(waitlist_router, prefix="/api/v1")
app.include_router(reports_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")
app.include_router(audit_router, prefix="/api/v1")


@app.exception_handler(GateRedirect)
async def gate_redirect_handler(request: Request, exc: GateRedirect) -> RedirectResponse:
    """Send callers the gate turned away to the login or landing surface."""
    decision = exc.decision
    location = decision.location or settings.login_path
    logger.info(
        "Gate %s for %s %s",
        decision.outcome.value,
        request.method,
        request.url.path,
    )
    response = RedirectResponse(location, status_code=status.HTTP_303_SEE_OTHER)
    if decision.clear_session:
        response.delete_cookie(settings.session_cookie_name)
    return response


@app.on_event("startup")
async def on_startup() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("moments_admin").setLevel(settings.log_level.upper())


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the service."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "login": settings.login_path,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("moments_admin.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
