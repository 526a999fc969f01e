import tempfile

from .base import *

DEBUG = False

SECRET_KEY = 'test-secret-key'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

ALLOWED_HOSTS = ['testserver']

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
EMAIL_FAIL_SILENTLY = False
ADMIN_EMAILS = 'admin@example.com'

MEDIA_ROOT = Path(tempfile.mkdtemp(prefix='kafala-media-'))
PRIVATE_MEDIA_ROOT = Path(tempfile.mkdtemp(prefix='kafala-private-'))

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

MAINTENANCE_MODE = False

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'handlers': {'null': {'class': 'logging.NullHandler'}},
    'root': {'handlers': ['null'], 'level': 'CRITICAL'},
}
