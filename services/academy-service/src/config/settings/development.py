"""
Development settings for Academy Service
"""

from .base import *

DEBUG = True

ALLOWED_HOSTS = ['*']

# SQLite unless a PostgreSQL host is configured
if not os.environ.get('DB_HOST'):
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': BASE_DIR / 'db.sqlite3',
        }
    }

# CORS - Allow all in development
CORS_ALLOW_ALL_ORIGINS = True

AUTH_SETTINGS['ALLOW_ADMIN_REGISTRATION'] = True

# Simplified logging
LOGGING['handlers']['console']['formatter'] = 'standard'
LOGGING['root']['level'] = 'DEBUG'
