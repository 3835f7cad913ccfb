"""
Configuration management for the EduVerse backend.
Loads configuration from environment variables and .env file.
"""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
# Look for .env file in the backend directory or project root
BACKEND_DIR = Path(__file__).parent.parent
PROJECT_ROOT = BACKEND_DIR.parent
ENV_FILE = PROJECT_ROOT / ".env"

if ENV_FILE.exists():
    load_dotenv(ENV_FILE)
else:
    backend_env = BACKEND_DIR / ".env"
    if backend_env.exists():
        load_dotenv(backend_env)

# Base paths
BASE_DIR = PROJECT_ROOT
DATA_DIR = Path(os.getenv("DATA_DIR", str(BASE_DIR / "data")))
DB_PATH = Path(os.getenv("DB_PATH", str(DATA_DIR / "eduverse.db")))
SCHEMA_FILE = BACKEND_DIR / "db" / "schema.sql"
TEMPLATES_DIR = BACKEND_DIR / "templates"

# Environment
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
DEBUG = os.getenv("DEBUG", "false").lower() == "true"

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE", "logs/app.log" if ENVIRONMENT == "production" else "") or None

# Sessions
SESSION_SECRET_KEY = os.getenv("SESSION_SECRET_KEY", "dev-only-session-secret-change-me-please")
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "eduverse_session")
SESSION_MAX_AGE = int(os.getenv("SESSION_MAX_AGE", str(60 * 60 * 24)))  # 1 day

# Password hashing
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

# Pagination
DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "100"))

# Publishing rules
REQUIRE_OBJECTIVES_TO_PUBLISH = os.getenv("REQUIRE_OBJECTIVES_TO_PUBLISH", "false").lower() == "true"

# API configuration
API_V1_PREFIX = "/api/v1"
# CORS origins can be comma-separated list in env var
CORS_ORIGINS_STR = os.getenv("CORS_ORIGINS", "http://localhost:3000")
CORS_ORIGINS = [origin.strip() for origin in CORS_ORIGINS_STR.split(",") if origin.strip()]


class CourseStatus:
    """Course lifecycle states."""
    DRAFT = "draft"
    PUBLISHED = "published"

    ALL = (DRAFT, PUBLISHED)


class Role:
    """Role ids as seeded in the roles table."""
    STUDENT = 1
    INSTRUCTOR = 2
    ADMIN = 3

    NAMES = {
        STUDENT: "student",
        INSTRUCTOR: "instructor",
        ADMIN: "admin",
    }

    # Landing page after sign-in
    HOME = {
        STUDENT: "/student/dashboard",
        INSTRUCTOR: "/instructor/courses",
        ADMIN: "/",
    }
