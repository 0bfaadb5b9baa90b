"""
Health Check Module.

Liveness and readiness endpoints for the LMS service.
"""
import logging
import time
from typing import Dict, Any, List

from django.db import connection, DatabaseError
from django.core.cache import cache
from django.conf import settings
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class HealthStatus:
    """Health check status constants."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"


def check_database() -> Dict[str, Any]:
    """Check database connectivity."""
    start = time.time()
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except DatabaseError as e:
        logger.error(f"Database health check failed: {e}")
        return {
            "name": "database",
            "status": HealthStatus.UNHEALTHY,
            "error": str(e),
        }
    return {
        "name": "database",
        "status": HealthStatus.HEALTHY,
        "latency_ms": round((time.time() - start) * 1000, 2),
    }


def check_cache() -> Dict[str, Any]:
    """Check cache read/write round trip."""
    start = time.time()
    cache_key = f"health_check_{time.time()}"
    try:
        cache.set(cache_key, "OK", 10)
        value = cache.get(cache_key)
        cache.delete(cache_key)
    except Exception as e:
        logger.error(f"Cache health check failed: {e}")
        return {
            "name": "cache",
            "status": HealthStatus.UNHEALTHY,
            "error": str(e),
        }

    if value != "OK":
        return {
            "name": "cache",
            "status": HealthStatus.DEGRADED,
            "error": "Cache read/write mismatch",
        }

    return {
        "name": "cache",
        "status": HealthStatus.HEALTHY,
        "latency_ms": round((time.time() - start) * 1000, 2),
    }


def overall_status(checks: List[Dict[str, Any]]) -> str:
    statuses = [c["status"] for c in checks]
    if HealthStatus.UNHEALTHY in statuses:
        return HealthStatus.UNHEALTHY
    if HealthStatus.DEGRADED in statuses:
        return HealthStatus.DEGRADED
    return HealthStatus.HEALTHY


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def health_check(request):
    """Returns 200 while the process is serving requests."""
    return Response({
        "status": HealthStatus.HEALTHY,
        "service": getattr(settings, 'SERVICE_NAME', 'lms-service'),
        "timestamp": timezone.now().isoformat(),
    })


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def liveness_check(request):
    return Response({
        "status": "alive",
        "timestamp": timezone.now().isoformat(),
    })


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def readiness_check(request):
    """
    Readiness probe endpoint.

    Checks the database and cache; 503 when either is unhealthy.
    """
    checks = [check_database(), check_cache()]
    status = overall_status(checks)

    return Response(
        {
            "status": status,
            "checks": checks,
            "timestamp": timezone.now().isoformat(),
        },
        status=503 if status == HealthStatus.UNHEALTHY else 200
    )


def get_health_urlpatterns():
    """
    Returns URL patterns for health check endpoints.

    Usage in urls.py:
        urlpatterns += get_health_urlpatterns()
    """
    from django.urls import path

    return [
        path('health/', health_check, name='health'),
        path('health/live/', liveness_check, name='liveness'),
        path('health/ready/', readiness_check, name='readiness'),
    ]
