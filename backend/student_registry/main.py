"""
Student Registry - FastAPI Application Entry Point.

create_app() builds the application from an explicit Settings object:
1. Sets up structured JSON logging
2. Builds the database engine and session factory (kept on app.state)
3. Implements request ID middleware (X-Request-ID header)
4. Registers the student routes
5. Provides health check endpoint
6. Creates the student table at startup when enabled

Run locally with:
    uvicorn student_registry.main:app --reload
"""

import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request

from student_registry.config import Settings
from student_registry.database import build_engine, build_session_factory, create_tables
from student_registry.logging_config import (
    setup_logging, get_logger, log_with_context,
    request_id_var, generate_request_id
)
from student_registry.routes import students

logger = get_logger("http")
db_logger = get_logger("db")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application; settings default to the environment."""
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level)

    engine = build_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.auto_create_tables:
            log_with_context(db_logger, "INFO", "Creating tables",
                             extra_data={"database": settings.redacted_url()})
            create_tables(engine)
        yield
        engine.dispose()

    app = FastAPI(
        title=settings.app_name,
        description="Student registration form, insert handler and listing page.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    # ──────────────────────────────────────────────────────────
    # Request ID Middleware
    #
    # Generates a UUID per request, stores it in a context variable
    # for every log entry, logs start/end with latency and returns
    # it in the X-Request-ID header.
    # ──────────────────────────────────────────────────────────
    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        req_id = generate_request_id()
        request_id_var.set(req_id)
        start_time = time.time()

        log_with_context(logger, "INFO",
            f"Request started: {request.method} {request.url.path}",
            context={"request_id": req_id},
            extra_data={
                "ip": request.client.host if request.client else "unknown",
                "user_agent": request.headers.get("user-agent", ""),
            })

        response = await call_next(request)

        duration_ms = (time.time() - start_time) * 1000
        response.headers["X-Request-ID"] = req_id

        log_with_context(logger, "INFO",
            f"Request completed: {request.method} {request.url.path} → {response.status_code}",
            context={"request_id": req_id},
            extra_data={
                "duration_ms": round(duration_ms, 2),
                "status_code": response.status_code
            })

        return response

    app.include_router(students.router, tags=["Students"])

    @app.get("/health", tags=["Health"])
    def health_check():
        """Health check endpoint for container probes."""
        return {"status": "healthy", "service": "student-registry", "version": "1.0.0"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
