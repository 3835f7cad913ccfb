"""
Configuration validation for the EduVerse backend.
Validates session settings, schema and template files, database and limits on startup.
"""
import os
from typing import List, Dict, Any


class ConfigValidator:
    """Validates system configuration before the app starts serving."""

    DEV_SECRET_PREFIX = "dev-only"

    def __init__(self):
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def validate_all(self) -> Dict[str, Any]:
        """
        Run all validation checks.

        Returns:
            {
                "valid": bool,
                "errors": List[str],
                "warnings": List[str]
            }
        """
        self.errors = []
        self.warnings = []

        self._validate_session_secret()
        self._validate_files()
        self._validate_database()
        self._validate_config_values()

        return {
            "valid": len(self.errors) == 0,
            "errors": self.errors,
            "warnings": self.warnings
        }

    def _validate_session_secret(self):
        """The session cookie signing key must be real outside development."""
        from core.config import ENVIRONMENT, SESSION_SECRET_KEY

        if SESSION_SECRET_KEY.startswith(self.DEV_SECRET_PREFIX):
            if ENVIRONMENT == "production":
                self.errors.append(
                    "SESSION_SECRET_KEY is not set. "
                    "Set a random value of at least 32 characters."
                )
            else:
                self.warnings.append("Using the development session secret.")
        elif len(SESSION_SECRET_KEY) < 32:
            self.warnings.append("SESSION_SECRET_KEY is shorter than 32 characters.")

    def _validate_files(self):
        """Check that the schema file and templates directory exist."""
        from core.config import SCHEMA_FILE, TEMPLATES_DIR

        if not SCHEMA_FILE.exists():
            self.errors.append(f"Schema file not found: {SCHEMA_FILE}")
        elif SCHEMA_FILE.stat().st_size == 0:
            self.errors.append(f"Schema file is empty: {SCHEMA_FILE}")

        if not TEMPLATES_DIR.is_dir():
            self.errors.append(f"Templates directory not found: {TEMPLATES_DIR}")

    def _validate_database(self):
        """Check that the database location is writable."""
        from core.config import DB_PATH

        if DB_PATH.exists():
            if not os.access(DB_PATH, os.W_OK):
                self.errors.append(f"Database file is not writable: {DB_PATH}")
            return

        self.warnings.append(
            f"Database file not found at {DB_PATH}. "
            "Will be created on first run."
        )
        parent = DB_PATH.parent
        while not parent.exists() and parent != parent.parent:
            parent = parent.parent
        if not os.access(parent, os.W_OK):
            self.errors.append(f"Cannot create database under {parent}: directory is not writable")

    def _validate_config_values(self):
        """Validate configuration value ranges."""
        from core.config import BCRYPT_ROUNDS, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, SESSION_MAX_AGE

        if DEFAULT_PAGE_SIZE < 1:
            self.errors.append(f"DEFAULT_PAGE_SIZE ({DEFAULT_PAGE_SIZE}) must be >= 1")

        if MAX_PAGE_SIZE < DEFAULT_PAGE_SIZE:
            self.errors.append(
                f"MAX_PAGE_SIZE ({MAX_PAGE_SIZE}) must be >= DEFAULT_PAGE_SIZE ({DEFAULT_PAGE_SIZE})"
            )

        if not (4 <= BCRYPT_ROUNDS <= 31):
            self.errors.append(f"BCRYPT_ROUNDS ({BCRYPT_ROUNDS}) must be between 4 and 31")
        elif BCRYPT_ROUNDS < 10:
            self.warnings.append(f"BCRYPT_ROUNDS ({BCRYPT_ROUNDS}) is low for production use")

        if SESSION_MAX_AGE <= 0:
            self.errors.append(f"SESSION_MAX_AGE ({SESSION_MAX_AGE}) must be positive")

# Global validator instance
config_validator = ConfigValidator()
