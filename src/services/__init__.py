"""Business logic services.

Pure rules (hierarchy, commission, incentive) take plain objects; the
transactional operations take an AsyncSession and never commit.
"""

from src.services.errors import (
    ConflictError,
    IntegrityWarning,
    NotFoundError,
    PermissionDeniedError,
    ServiceError,
    ValidationError,
)

__all__ = [
    "ServiceError",
    "ValidationError",
    "NotFoundError",
    "PermissionDeniedError",
    "ConflictError",
    "IntegrityWarning",
]
