# services/lms-service/src/apps/core/tests/factories.py
"""
Test data builders shared by the TestCase suites and the pytest fixtures.
"""

import uuid

from rest_framework.test import APIClient

from shared.common.authentication import TokenUser

from ..models import Achievement, Badge, Course, Lesson, Module, Tenant, User

DEFAULT_PASSWORD = 'TestPassword123!'


def make_tenant(name=None, **kwargs) -> Tenant:
    return Tenant.objects.create(name=name or f"School {uuid.uuid4().hex[:6]}", **kwargs)


def make_user(tenant=None, role=User.Role.STUDENT, name='Test User', email=None,
              password=DEFAULT_PASSWORD) -> User:
    user = User(
        email=email or f"user_{uuid.uuid4().hex[:8]}@test.com",
        name=name,
        role=role,
        tenant=tenant,
    )
    user.set_password(password)
    user.save()
    return user


def make_course(tenant, instructor=None, title=None, **kwargs) -> Course:
    return Course.objects.create(
        title=title or f"Course {uuid.uuid4().hex[:6]}",
        tenant=tenant,
        instructor=instructor,
        **kwargs
    )


def make_module(course, title='Getting Started', order=0, **kwargs) -> Module:
    return Module.objects.create(course=course, title=title, order=order, **kwargs)


def make_lesson(module, lesson_type=Lesson.Type.READING, title='Lesson', order=0, **kwargs) -> Lesson:
    defaults = {
        Lesson.Type.VIDEO: {'video_url': 'https://videos.example.com/intro.mp4'},
        Lesson.Type.READING: {'content': 'Read this first.'},
        Lesson.Type.QUIZ: {'questions': [{'question': '2 + 2?', 'type': 'multiple_choice',
                                          'options': ['3', '4'], 'correct_answer': '4'}]},
        Lesson.Type.ASSIGNMENT: {'instructions': 'Write a short essay.'},
        Lesson.Type.DISCUSSION: {'prompt': 'Introduce yourself.'},
    }[lesson_type]
    defaults.update(kwargs)
    return Lesson.objects.create(module=module, type=lesson_type, title=title, order=order, **defaults)


def make_badge(tenant=None, name='Starter', **kwargs) -> Badge:
    return Badge.objects.create(name=name, tenant=tenant, **kwargs)


def make_achievement(tenant, achievement_type=Achievement.Type.COURSE_PROGRESS,
                     metric=Achievement.Metric.SCORE, threshold=50, points=25,
                     badge=None, name=None, **kwargs) -> Achievement:
    return Achievement.objects.create(
        name=name or f"Achievement {uuid.uuid4().hex[:6]}",
        tenant=tenant,
        type=achievement_type,
        criteria_metric=metric,
        criteria_threshold=threshold,
        points=points,
        badge=badge or make_badge(tenant),
        **kwargs
    )


def token_user(user: User) -> TokenUser:
    """The request user a valid access token for ``user`` would produce."""
    return TokenUser({
        'sub': str(user.id),
        'email': user.email,
        'name': user.name,
        'role': user.role,
        'tenant_id': str(user.tenant_id) if user.tenant_id else None,
    })


def client_for(user: User) -> APIClient:
    client = APIClient()
    client.force_authenticate(user=token_user(user))
    return client
