# services/lms-service/src/config/settings/development.py
"""
Development settings for LMS Service
"""

from .base import *

DEBUG = True

ALLOWED_HOSTS = ['*']

# CORS - Allow all in development
CORS_ALLOW_ALL_ORIGINS = True

# Email backend for development
EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

# Simplified logging
LOGGING['root']['level'] = 'DEBUG'

# Realtime publishing off unless explicitly enabled
REALTIME_ENABLED = os.environ.get('REALTIME_ENABLED', 'False').lower() == 'true'
