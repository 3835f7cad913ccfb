"""
Accounts: sign-up and credential checks.
"""
import logging
import re
from typing import Optional, Dict, Any

import bcrypt

from core.config import BCRYPT_ROUNDS, Role
from core.database import Database
from core.exceptions import AccountSuspended, ValidationError

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 8


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash or over-long password
        return False


class UserService:
    def __init__(self, db: Database, bcrypt_rounds: int = BCRYPT_ROUNDS):
        self.db = db
        self.bcrypt_rounds = bcrypt_rounds

    def get_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        row = self.db.execute_one(
            "SELECT * FROM users WHERE email = ? LIMIT 1",
            ((email or "").strip().lower(),),
        )
        return dict(row) if row else None

    def create_user(self, name: str, email: str, password: str, role_id: int = Role.STUDENT) -> Dict[str, Any]:
        """
        Register a student or instructor account.

        Raises:
            ValidationError: missing fields, bad email, short password,
                unsupported role or duplicate email
        """
        name = (name or "").strip()
        email = (email or "").strip().lower()
        errors = []
        if not name:
            errors.append("Name is required")
        if not EMAIL_RE.match(email):
            errors.append("Please provide a valid email address")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        elif len(password.encode("utf-8")) > 72:
            # bcrypt input limit
            errors.append("Password is too long")
        if role_id not in (Role.STUDENT, Role.INSTRUCTOR):
            errors.append("Unsupported account type")
        if not errors and self.get_by_email(email):
            errors.append("A user with this email already exists")
        if errors:
            raise ValidationError(errors)

        user_id = self.db.execute_write(
            "INSERT INTO users (name, email, password_hash, role_id) VALUES (?, ?, ?, ?)",
            (name, email, hash_password(password, self.bcrypt_rounds), role_id),
        )
        logger.info(f"Created {Role.NAMES[role_id]} account {user_id}")
        return {"id": user_id, "name": name, "email": email, "role_id": role_id}

    def authenticate(self, email: str, password: str) -> Optional[Dict[str, Any]]:
        """
        Returns:
            The user row as a dict, or None for unknown email / wrong password

        Raises:
            AccountSuspended: credentials are valid but the account is suspended
        """
        user = self.get_by_email(email)
        if not user or not verify_password(password or "", user["password_hash"]):
            logger.info("Failed sign-in attempt")
            return None
        if user["status"] == "suspended":
            raise AccountSuspended()
        return user
