"""
LMS Service Exceptions.
"""
from shared.common.exceptions import (
    BadRequestException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ResourceLockedException,
    UnauthorizedException,
    UnprocessableEntityException,
)


class AchievementNotFound(NotFoundException):
    """Raised when an achievement is not found."""
    default_detail = "Achievement not found"
    default_code = "achievement_not_found"
    error_code = "ACHIEVEMENT_NOT_FOUND"


class UnsupportedMetric(BadRequestException):
    """Raised when a metric is not valid for the achievement type."""
    default_detail = "Unsupported metric"
    default_code = "unsupported_metric"
    error_code = "UNSUPPORTED_METRIC"


class UnknownAchievementType(BadRequestException):
    """Raised for an achievement type with no progress rule."""
    default_detail = "Unknown achievement type"
    default_code = "unknown_achievement_type"
    error_code = "UNKNOWN_ACHIEVEMENT_TYPE"


class CustomProgressNotSupported(UnprocessableEntityException):
    """Raised when numeric progress is requested for a custom achievement."""
    default_detail = "Custom achievement progress must be handled separately"
    default_code = "custom_progress_not_supported"
    error_code = "CUSTOM_PROGRESS_NOT_SUPPORTED"


class CapacityReached(ConflictException):
    """Raised when a course has no enrollment capacity left."""
    default_detail = "Course has reached maximum enrollment capacity"
    default_code = "capacity_reached"
    error_code = "CAPACITY_REACHED"


class PointsImmutable(ConflictException):
    """Raised when a points record is modified."""
    default_detail = "Points cannot be modified after creation"
    default_code = "points_immutable"
    error_code = "POINTS_IMMUTABLE"


class DuplicateLevel(ConflictException):
    """Raised when a level number already exists for a tenant."""
    default_detail = "Level already exists for this tenant"
    default_code = "duplicate_level"
    error_code = "DUPLICATE_LEVEL"


class InvalidLevelThreshold(BadRequestException):
    """Raised when a level does not require more points than the previous one."""
    default_detail = "Points required must be greater than previous level"
    default_code = "invalid_level_threshold"
    error_code = "INVALID_LEVEL_THRESHOLD"


class TenantRequired(BadRequestException):
    """Raised when a tenant-scoped record has no tenant."""
    default_detail = "Tenant is required"
    default_code = "tenant_required"
    error_code = "TENANT_REQUIRED"


class DuplicateEmail(ConflictException):
    """Raised when an email is already taken within a tenant."""
    default_detail = "Email must be unique within tenant"
    default_code = "duplicate_email"
    error_code = "DUPLICATE_EMAIL"


class InvalidCredentials(UnauthorizedException):
    """Raised on a failed login."""
    default_detail = "Invalid email or password"
    default_code = "invalid_credentials"
    error_code = "INVALID_CREDENTIALS"


class InvalidToken(UnauthorizedException):
    """Raised when a refresh token cannot be used."""
    default_detail = "Invalid or expired token"
    default_code = "invalid_token"
    error_code = "INVALID_TOKEN"


class AccountLocked(ResourceLockedException):
    """Raised when an account is locked after repeated failed logins."""
    default_detail = "Account is temporarily locked due to too many failed login attempts"
    default_code = "account_locked"
    error_code = "ACCOUNT_LOCKED"

    def __init__(self, locked_until=None):
        super().__init__()
        self.extra_data = {
            'errors': {'locked_until': locked_until.isoformat() if locked_until else None}
        }


class SelfEnrollmentNotAllowed(ForbiddenException):
    """Raised when a student enrolls in a course that disallows it."""
    default_detail = "Self-enrollment is not allowed for this course"
    default_code = "self_enrollment_not_allowed"
    error_code = "SELF_ENROLLMENT_NOT_ALLOWED"


class NotAuthenticated(UnauthorizedException):
    """Raised when a server action runs without a user."""
    default_detail = "Unauthorized"
    default_code = "unauthorized"
