# Shared Common Library for the LMS service.
# Authentication, error envelope, permissions, middleware, pagination,
# health checks and small helpers used by the Django apps.

__version__ = "1.0.0"
