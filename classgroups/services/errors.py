"""Service error classes.

Routers never build HTTP errors themselves; the app maps these to responses.
"""

from typing import List, Optional


class ClassGroupsError(Exception):
    """Base exception for business operations."""

    status_code = 400

    def __init__(self, message: str, details: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or []


class NotFoundError(ClassGroupsError):
    """Raised when a class or group does not exist (or is not in this class)."""

    status_code = 404


class UnauthorizedError(ClassGroupsError):
    """Raised when the admin token is missing or wrong."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class BusinessRuleError(ClassGroupsError):
    """Raised for invalid input or an operation the class state does not allow."""

    status_code = 400
