"""
Service-layer error taxonomy.

Services raise these; the API layer turns them into HTTP responses
(see src.main). IntegrityWarning is never raised, it only tags log
records for data problems that are tolerated by design.
"""

from fastapi import status


class ServiceError(Exception):
    """Base class for expected business failures."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Malformed input caught before any write."""

    status_code = 422


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class PermissionDeniedError(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN


class ConflictError(ServiceError):
    """The read-check step of a transaction failed; nothing was written."""

    status_code = status.HTTP_409_CONFLICT


class IntegrityWarning(UserWarning):
    """Broken referrer link, missing tier or similar tolerated data gap."""
