"""
Test settings for the Newsroom project.
"""

import tempfile

from .base import *

DEBUG = False

ALLOWED_HOSTS = ['testserver', 'localhost']

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
    }
}

STORAGES['staticfiles'] = {
    'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
}

MEDIA_ROOT = Path(tempfile.mkdtemp(prefix='newsroom-media-'))

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

CELERY_TASK_ALWAYS_EAGER = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

# Generous rates so endpoint tests never trip throttles
REST_FRAMEWORK['DEFAULT_THROTTLE_RATES'] = {
    'submission': '1000/minute',
    'burst': '1000/minute',
}

LOGGING['handlers']['file'] = {
    'class': 'logging.NullHandler',
}
