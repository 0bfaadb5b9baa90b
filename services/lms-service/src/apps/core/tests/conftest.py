# services/lms-service/src/apps/core/tests/conftest.py
"""
Pytest Configuration and Fixtures

Provides common fixtures for the LMS Service tests.
"""

import pytest
from rest_framework.test import APIRequestFactory

from apps.core.models import User

from .factories import make_course, make_tenant, make_user, token_user


# ==================== REQUEST FACTORY ====================

@pytest.fixture
def request_factory() -> APIRequestFactory:
    return APIRequestFactory()


# ==================== TENANT AND USER FIXTURES ====================

@pytest.fixture
def tenant(db):
    """Create the primary test tenant."""
    return make_tenant(name='Acme Academy')


@pytest.fixture
def other_tenant(db):
    """Create a second tenant for isolation checks."""
    return make_tenant(name='Globex Institute')


@pytest.fixture
def admin_user(db):
    """Create a platform admin without a tenant."""
    return make_user(role=User.Role.ADMIN, name='Ada Admin')


@pytest.fixture
def instructor(tenant):
    """Create an instructor in the primary tenant."""
    return make_user(tenant=tenant, role=User.Role.INSTRUCTOR, name='Ivan Instructor')


@pytest.fixture
def student(tenant):
    """Create a student in the primary tenant."""
    return make_user(tenant=tenant, role=User.Role.STUDENT, name='Sam Student')


@pytest.fixture
def course(tenant, instructor):
    """Create a course taught by ``instructor``."""
    return make_course(tenant, instructor=instructor, title='Intro to Python')


# ==================== REQUEST FIXTURES ====================

@pytest.fixture
def make_request(request_factory):
    """Factory fixture building a request authenticated as a given user."""
    def _make_request(user=None, method='get', path='/'):
        request = getattr(request_factory, method)(path)
        request.user = token_user(user) if user is not None else None
        return request

    return _make_request
