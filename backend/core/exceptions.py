"""
Error taxonomy for course, enrollment and account operations.
"""
from typing import List, Optional


class LMSError(Exception):
    """Base class for errors surfaced to the HTTP layer."""
    status_code = 400
    default_message = "Request could not be completed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(LMSError):
    """One or more submitted fields are missing or malformed."""
    default_message = "Invalid input data"

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or self.default_message)


class NotFoundOrForbidden(LMSError):
    """Id is absent, or the row belongs to another instructor."""
    status_code = 404
    default_message = "Course not found or you do not have permission to modify it"


class AlreadyEnrolled(LMSError):
    default_message = "You are already enrolled in this course"


class NotEnrolled(LMSError):
    default_message = "You are not enrolled in this course"


class CourseNotPublished(LMSError):
    default_message = "This course is not open for enrollment"


class NotAuthenticated(LMSError):
    status_code = 401
    default_message = "Please login to access this page"


class PermissionDenied(LMSError):
    status_code = 403
    default_message = "Access denied"


class AccountSuspended(LMSError):
    status_code = 403
    default_message = "Your account has been suspended!"


class StorageError(LMSError):
    """Lower-level database failure. Any open transaction has been rolled back."""
    status_code = 500
    default_message = "Internal server error"
