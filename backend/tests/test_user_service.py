"""
Tests for account creation and sign-in checks.
"""
import pytest

from conftest import PASSWORD
from core.config import Role
from core.exceptions import AccountSuspended, ValidationError
from services.user_service import hash_password, verify_password


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("s3cret-pass", rounds=4)
        assert hashed != "s3cret-pass"
        assert verify_password("s3cret-pass", hashed)
        assert not verify_password("wrong", hashed)

    def test_malformed_hash(self):
        assert verify_password("anything", "not-a-hash") is False


class TestCreateUser:
    """Test sign-up validation."""

    def test_create_student(self, user_service):
        user = user_service.create_user("Kim", "  Kim@Example.com ", PASSWORD)
        assert user["email"] == "kim@example.com"
        assert user["role_id"] == Role.STUDENT

    def test_invalid_fields(self, user_service):
        with pytest.raises(ValidationError) as exc_info:
            user_service.create_user("", "not-an-email", "short")

        errors = exc_info.value.errors
        assert "Name is required" in errors
        assert "Please provide a valid email address" in errors
        assert "Password must be at least 8 characters" in errors

    def test_admin_signup_rejected(self, user_service):
        with pytest.raises(ValidationError):
            user_service.create_user("Root", "root@example.com", PASSWORD, Role.ADMIN)

    def test_duplicate_email(self, user_service, student):
        with pytest.raises(ValidationError) as exc_info:
            user_service.create_user("Again", student["email"].upper(), PASSWORD)
        assert exc_info.value.errors == ["A user with this email already exists"]


class TestAuthenticate:
    """Test credential checks."""

    def test_valid_credentials(self, user_service, student):
        user = user_service.authenticate(student["email"], PASSWORD)
        assert user["id"] == student["id"]

    def test_wrong_password_or_unknown_email(self, user_service, student):
        assert user_service.authenticate(student["email"], "wrong-password") is None
        assert user_service.authenticate("ghost@example.com", PASSWORD) is None

    def test_suspended_account(self, db, user_service, student):
        db.execute_update("UPDATE users SET status = 'suspended' WHERE id = ?", (student["id"],))
        with pytest.raises(AccountSuspended):
            user_service.authenticate(student["email"], PASSWORD)
