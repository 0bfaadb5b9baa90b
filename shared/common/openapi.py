"""
OpenAPI/Swagger Configuration Module.

Schema generation uses drf-spectacular.
"""
from typing import Dict, Any, List


def get_spectacular_settings(
    service_name: str,
    service_description: str,
    version: str = "1.0.0",
) -> Dict[str, Any]:
    """
    Generate drf-spectacular settings.

    Args:
        service_name: Name of the service (e.g., "LMS Service")
        service_description: Description of what the service does
        version: API version

    Returns:
        Dictionary of drf-spectacular settings
    """
    return {
        'TITLE': f'{service_name} API',
        'DESCRIPTION': service_description,
        'VERSION': version,
        'SERVE_INCLUDE_SCHEMA': False,
        'COMPONENT_SPLIT_REQUEST': True,
        'SECURITY': [
            {'BearerAuth': []},
        ],
        'PREPROCESSING_HOOKS': [
            'shared.common.openapi.preprocess_exclude_health',
        ],
        'POSTPROCESSING_HOOKS': [
            'drf_spectacular.hooks.postprocess_schema_enums',
            'shared.common.openapi.postprocess_add_security_schemes',
        ],
        'SCHEMA_PATH_PREFIX': r'/api/v[0-9]+/',
        'SWAGGER_UI_SETTINGS': {
            'deepLinking': True,
            'persistAuthorization': True,
            'filter': True,
        },
        'SORT_OPERATIONS': True,
    }


def preprocess_exclude_health(endpoints: List, **kwargs) -> List:
    """Exclude health check endpoints from API documentation."""
    return [
        (path, path_regex, method, callback)
        for path, path_regex, method, callback in endpoints
        if not path.startswith('/health/')
    ]


def postprocess_add_security_schemes(result: Dict, **kwargs) -> Dict:
    """Add the bearer and tenant header schemes to the OpenAPI schema."""
    result.setdefault('components', {})
    result['components']['securitySchemes'] = {
        'BearerAuth': {
            'type': 'http',
            'scheme': 'bearer',
            'bearerFormat': 'JWT',
            'description': 'JWT Authorization header using the Bearer scheme.',
        },
        'TenantId': {
            'type': 'apiKey',
            'in': 'header',
            'name': 'X-Tenant-ID',
            'description': 'Tenant identifier for admin requests.',
        },
    }
    return result
