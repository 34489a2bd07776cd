"""
Development settings for CampusHub project.
"""

import os

from .base import *

# =============================================================================
# DEBUG
# =============================================================================
DEBUG = True

# =============================================================================
# ALLOWED HOSTS
# =============================================================================
ALLOWED_HOSTS = ['*']

# =============================================================================
# INSTALLED APPS - Development
# =============================================================================
INSTALLED_APPS = INSTALLED_APPS + [
    'debug_toolbar',
    'django_extensions',
]

# =============================================================================
# MIDDLEWARE - Development
# =============================================================================
MIDDLEWARE = ['debug_toolbar.middleware.DebugToolbarMiddleware'] + MIDDLEWARE

# =============================================================================
# DEBUG TOOLBAR
# =============================================================================
INTERNAL_IPS = ['127.0.0.1', 'localhost']

DEBUG_TOOLBAR_CONFIG = {
    'SHOW_TOOLBAR_CALLBACK': lambda request: DEBUG and not request.path.startswith('/api/'),
    'DISABLE_PANELS': {
        'debug_toolbar.panels.cache.CachePanel',
        'debug_toolbar.panels.profiling.ProfilingPanel',
    },
}

# =============================================================================
# EMAIL - Development (Console)
# =============================================================================
EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

# =============================================================================
# CORS - Development (Allow all)
# =============================================================================
CORS_ALLOW_ALL_ORIGINS = True

# =============================================================================
# LOGGING - Development
# =============================================================================
LOGGING['root']['level'] = 'DEBUG'
for _name in ('campushub', 'application', 'infrastructure', 'presentation'):
    LOGGING['loggers'][_name]['level'] = 'DEBUG'

# =============================================================================
# CACHE / CHANNELS - Development Override (No Redis required)
# =============================================================================
CHANNEL_LAYERS = {
    "default": {
        "BACKEND": "channels.layers.InMemoryChannelLayer"
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'campushub-dev-cache',
    }
}

# =============================================================================
# REST FRAMEWORK - Development Override (Disable global throttling)
# =============================================================================
REST_FRAMEWORK['DEFAULT_THROTTLE_CLASSES'] = []

# =============================================================================
# CELERY - Development Override (Filesystem broker, no Redis)
# =============================================================================
CELERY_BROKER_URL = 'filesystem://'
CELERY_RESULT_BACKEND = 'cache+memory://'
CELERY_BROKER_TRANSPORT_OPTIONS = {
    'data_folder_in': os.path.join(BASE_DIR, 'broker', 'out'),
    'data_folder_out': os.path.join(BASE_DIR, 'broker', 'out'),
    'data_folder_processed': os.path.join(BASE_DIR, 'broker', 'processed'),
}
for folder in CELERY_BROKER_TRANSPORT_OPTIONS.values():
    os.makedirs(folder, exist_ok=True)
