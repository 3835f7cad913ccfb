"""
FastAPI main application.
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from starlette.middleware.sessions import SessionMiddleware

from api.errors import register_exception_handlers
from api.routes import auth, courses, instructor, student
from core.config import (
    API_V1_PREFIX,
    CORS_ORIGINS,
    DB_PATH,
    ENVIRONMENT,
    LOG_FILE,
    LOG_LEVEL,
    SESSION_COOKIE_NAME,
    SESSION_MAX_AGE,
    SESSION_SECRET_KEY,
    Role,
)
from core.config_validator import config_validator
from core.database import Database
from core.logging_config import setup_logging

logger = logging.getLogger(__name__)


def create_app(database: Optional[Database] = None, validate_config: bool = True) -> FastAPI:
    """
    Build the application.

    Args:
        database: Database to serve from; opened at DB_PATH on startup when omitted
        validate_config: Run the startup configuration checks
    """
    app = FastAPI(
        title="EduVerse API",
        description="Course authoring and enrollment platform",
        version="1.0.0",
    )
    app.state.db = database

    @app.on_event("startup")
    def startup():
        if validate_config:
            logger.info("Validating configuration...")
            validation_result = config_validator.validate_all()

            for warning in validation_result["warnings"]:
                logger.warning(warning)

            if not validation_result["valid"]:
                for error in validation_result["errors"]:
                    logger.error(error)
                logger.critical("Application startup aborted due to configuration errors")
                raise SystemExit(1)

        if app.state.db is None:
            app.state.db = Database(DB_PATH)
        logger.info(f"Serving from database {app.state.db.db_path} ({ENVIRONMENT})")

    app.add_middleware(
        SessionMiddleware,
        secret_key=SESSION_SECRET_KEY,
        session_cookie=SESSION_COOKIE_NAME,
        max_age=SESSION_MAX_AGE,
        same_site="lax",
        https_only=ENVIRONMENT == "production",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(auth.router, tags=["auth"])
    app.include_router(instructor.router, prefix="/instructor", tags=["instructor"])
    app.include_router(student.router, prefix="/student", tags=["student"])
    app.include_router(courses.router, prefix=f"{API_V1_PREFIX}/courses", tags=["courses"])

    @app.get("/")
    def root(request: Request):
        """Send signed-in users to their landing page."""
        user = request.session.get("user")
        if not user:
            return RedirectResponse("/signin", status_code=303)
        return RedirectResponse(Role.HOME.get(user.get("role_id"), "/signin"), status_code=303)

    @app.get("/health")
    def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


setup_logging(LOG_LEVEL, LOG_FILE)
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
