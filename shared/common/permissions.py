# shared/common/permissions.py
"""
Custom Permission Classes for Role-Based Access Control (RBAC)

The LMS has three roles. Predicates here are the boolean building blocks;
row-level scoping (e.g. "same tenant") is applied in view querysets.
"""

from typing import TYPE_CHECKING, Optional

from rest_framework import permissions
from rest_framework.request import Request

if TYPE_CHECKING:
    from rest_framework.views import APIView


class Roles:
    """
    Role constants for the system.
    """

    ADMIN = 'admin'
    INSTRUCTOR = 'instructor'
    STUDENT = 'student'

    ALL = [ADMIN, INSTRUCTOR, STUDENT]


# =============================================================================
# PREDICATES
# =============================================================================

def _user(request: Request):
    user = getattr(request, 'user', None)
    if user is None or not getattr(user, 'is_authenticated', False):
        return None
    return user


def is_admin(request: Request) -> bool:
    user = _user(request)
    return bool(user) and getattr(user, 'role', None) == Roles.ADMIN


def is_instructor(request: Request) -> bool:
    user = _user(request)
    return bool(user) and getattr(user, 'role', None) == Roles.INSTRUCTOR


def is_student(request: Request) -> bool:
    user = _user(request)
    return bool(user) and getattr(user, 'role', None) == Roles.STUDENT


def has_role(request: Request, role: Optional[str] = None) -> bool:
    user = _user(request)
    if not user or not role:
        return False
    return getattr(user, 'role', None) == role


def is_same_user(request: Request, user_id) -> bool:
    user = _user(request)
    if not user or not user_id:
        return False
    return str(user.id) == str(user_id)


def is_same_tenant(request: Request, tenant_id) -> bool:
    user = _user(request)
    if not user or not tenant_id:
        return False
    return str(getattr(user, 'tenant_id', None)) == str(tenant_id)


def is_admin_or_instructor(request: Request) -> bool:
    return is_admin(request) or is_instructor(request)


def is_admin_or_self(request: Request, user_id) -> bool:
    if not _user(request):
        return False
    if is_admin(request):
        return True
    return is_same_user(request, user_id)


def is_admin_or_instructor_or_self(request: Request, user_id) -> bool:
    if not user_id:
        return False
    return (
        is_admin(request)
        or is_instructor(request)
        or (is_student(request) and is_same_user(request, user_id))
    )


# =============================================================================
# PERMISSION CLASSES
# =============================================================================

class IsAuthenticated(permissions.BasePermission):
    """Verify that user is authenticated"""

    def has_permission(self, request: Request, view: 'APIView') -> bool:
        return _user(request) is not None


class ActionPermission(permissions.BasePermission):
    """
    Maps the CRUD verb of a request to a predicate.

    Subclasses set ``read``, ``create``, ``update`` and ``delete`` to a
    callable taking the request, or to ``None`` to deny. Object checks go
    through ``has_object_access`` so a collection can compare the row.
    """

    read = staticmethod(lambda request: _user(request) is not None)
    create = staticmethod(is_admin)
    update = staticmethod(is_admin)
    delete = staticmethod(is_admin)

    def _verb(self, request: Request) -> str:
        if request.method in permissions.SAFE_METHODS:
            return 'read'
        if request.method == 'POST':
            return 'create'
        if request.method == 'DELETE':
            return 'delete'
        return 'update'

    def has_permission(self, request: Request, view: 'APIView') -> bool:
        if not _user(request):
            return False
        check = getattr(self, self._verb(request))
        if check is None:
            return False
        return bool(check(request))

    def has_object_permission(self, request: Request, view: 'APIView', obj) -> bool:
        return self.has_object_access(request, self._verb(request), obj)

    def has_object_access(self, request: Request, verb: str, obj) -> bool:
        return True
