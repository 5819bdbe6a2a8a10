"""Django settings for the charity operations ticket allocation service.

Deployment knobs come from environment variables; allocation knobs live in
the ``ALLOCATION`` dict and are read through ``django.conf.settings``.
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _get_env(name, default=None):
    return os.environ.get(name, default)


def _env_flag(name, default='false'):
    return _get_env(name, default).lower() in ('1', 'true', 'yes')


SECRET_KEY = _get_env('DJANGO_SECRET_KEY', 'dev-only-insecure-key')
DEBUG = _env_flag('DJANGO_DEBUG')
ALLOWED_HOSTS = [h for h in _get_env('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',') if h]

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'capacity',
    'help_requests',
    'notifications',
    'staffing',
    'admin_panel',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
]

ROOT_URLCONF = 'charity_ops.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'charity_ops.wsgi.application'

# SQLite by default. IMMEDIATE transactions take the write lock up front so
# concurrent ticket releases queue behind each other instead of failing.
if _get_env('DATABASE_ENGINE', 'sqlite') == 'postgresql':
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.postgresql',
            'NAME': _get_env('DATABASE_NAME', 'charity_ops'),
            'USER': _get_env('DATABASE_USER', 'postgres'),
            'PASSWORD': _get_env('DATABASE_PASSWORD', ''),
            'HOST': _get_env('DATABASE_HOST', 'localhost'),
            'PORT': _get_env('DATABASE_PORT', '5432'),
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': _get_env('DATABASE_NAME', str(BASE_DIR / 'db.sqlite3')),
            'OPTIONS': {
                'timeout': 30,
                'transaction_mode': 'IMMEDIATE',
            },
            'TEST': {
                'NAME': str(BASE_DIR / 'test_db.sqlite3'),
            },
        }
    }

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

LANGUAGE_CODE = 'en-gb'
TIME_ZONE = _get_env('DJANGO_TIME_ZONE', 'Europe/London')
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'

LOGIN_URL = '/admin/login/'

ALLOCATION = {
    # Monday is 0. Tuesday to Thursday are the default visit days.
    'OPERATING_WEEKDAYS': [1, 2, 3],
    'DEFAULT_CAPACITY': {
        'food': int(_get_env('CAPACITY_FOOD', '50')),
        'general': int(_get_env('CAPACITY_GENERAL', '20')),
    },
    'FALLBACK_CAPACITY': 10,
    'AVERAGE_SERVICE_MINUTES': int(_get_env('AVERAGE_SERVICE_MINUTES', '15')),
    'COVERAGE_THRESHOLD': 80,
    'TICKET_PREFIX': _get_env('TICKET_PREFIX', 'LDH'),
    'WARNING_WINDOW_DAYS': 7,
    'AVAILABLE_DAYS_WINDOW': 14,
}

LOG_LEVEL = _get_env('LOG_LEVEL', 'INFO').upper()

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'standard': {
            'format': '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
            'datefmt': '%Y-%m-%d %H:%M:%S',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'standard',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        app: {'level': LOG_LEVEL}
        for app in ('capacity', 'help_requests', 'notifications', 'staffing', 'admin_panel')
    },
}
