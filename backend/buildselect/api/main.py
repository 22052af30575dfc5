"""
BuildSelect API - Main FastAPI Application Entry Point

Blueprint analysis and product selection generation for construction
projects. Combines all routers and middleware into a single FastAPI
application.

Run with:
    uvicorn buildselect.api.main:app --host 0.0.0.0 --port 8000
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from buildselect.api.routes_analysis import router as analysis_router
from buildselect.api.routes_selection import router as selection_router
from buildselect.config import LOG_LEVEL
from buildselect.errors import BuildSelectError

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="BuildSelect API",
    description="Blueprint analysis and product selection generation",
    version="0.1.0",
)

# ---------------------------------------------------------------------------
# CORS middleware (allow all origins for MVP -- restrict in production)
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------
@app.exception_handler(BuildSelectError)
async def buildselect_exception_handler(request: Request, exc: BuildSelectError):
    """Return the structured body of a known domain error."""
    logger.warning(
        "%s (%s) on %s: %s", type(exc).__name__, exc.code, request.url.path, exc.message
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch unhandled exceptions and return structured JSON error responses."""
    error_type = type(exc).__name__

    # Map known error types to user-friendly messages
    error_messages = {
        "ValueError": "Invalid request. Please check the submitted data.",
        "ConnectionError": "Could not reach an upstream service.",
        "TimeoutError": "The request took too long.",
    }

    message = error_messages.get(error_type, "An unexpected error occurred.")

    logger.error("%s on %s: %s", error_type, request.url.path, exc, exc_info=exc)

    status_code = 400 if isinstance(exc, ValueError) else 500

    return JSONResponse(
        status_code=status_code,
        content={
            "error": error_type,
            "message": message,
            "detail": str(exc) if status_code < 500 else None,
        },
    )


# ---------------------------------------------------------------------------
# Include routers
# ---------------------------------------------------------------------------
app.include_router(analysis_router)
app.include_router(selection_router)


# ---------------------------------------------------------------------------
# Root & health-check endpoints
# ---------------------------------------------------------------------------
@app.get("/")
async def root():
    """Root endpoint returning basic API information."""
    return {
        "name": "BuildSelect API",
        "version": "0.1.0",
        "status": "running",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring and load balancers."""
    return {"status": "healthy"}


# ---------------------------------------------------------------------------
# Convenience: run directly with `python -m buildselect.api.main`
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    import uvicorn

    uvicorn.run("buildselect.api.main:app", host="0.0.0.0", port=8000, reload=True)
