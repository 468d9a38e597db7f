"""Test settings: in-memory SQLite and eager Celery."""

from .base import *  # noqa: F401,F403

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

CAR_RENTAL_SYNC_CAR_STATUS = True
CAR_RENTAL_DRAFT_TTL_MINUTES = 0
