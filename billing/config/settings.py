"""
Django settings for the billing project.

There is no database: products, buyers, salesmen and bills live on the
remote billing API. Django supplies settings, the cache framework,
management commands and the test runner.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent.parent

load_dotenv(BASE_DIR / '.env')

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'django-insecure-billing-dev-key')

DEBUG = os.environ.get('DJANGO_DEBUG', 'False').lower() in ('1', 'true', 'yes')

ALLOWED_HOSTS = []

INSTALLED_APPS = [
    'rest_framework',
    'billing.core',
    'billing.catalog',
    'billing.parties',
    'billing.pricing',
    'billing.pos',
    'billing.reports',
]

DATABASES = {}

USE_TZ = True
TIME_ZONE = os.environ.get('BILLING_TIME_ZONE', 'Asia/Kolkata')

# Remote billing API
BILLING_API_URL = os.environ.get('BILLING_API_URL', 'http://localhost:4000').rstrip('/')
BILLING_API_TOKEN = os.environ.get('BILLING_API_TOKEN', '')
BILLING_API_TIMEOUT = float(os.environ.get('BILLING_API_TIMEOUT', '15'))
BILLING_API_MAX_RETRIES = int(os.environ.get('BILLING_API_MAX_RETRIES', '3'))

# Tenant the cashier desk bills for
BILLING_COMPANY_ID = os.environ.get('BILLING_COMPANY_ID', '')
BILLING_COMPANY_NAME = os.environ.get('BILLING_COMPANY_NAME', 'COMPANY')
BILLING_COMPANY_GST_NO = os.environ.get('BILLING_COMPANY_GST_NO', '27AAAPL1234C1ZV')

REDIS_URL = os.environ.get('REDIS_URL', '')

if REDIS_URL:
    CACHES = {
        'default': {
            'BACKEND': 'django_redis.cache.RedisCache',
            'LOCATION': REDIS_URL,
            'OPTIONS': {
                'CLIENT_CLASS': 'django_redis.client.DefaultClient',
                'IGNORE_EXCEPTIONS': True,
            },
            'KEY_PREFIX': 'billing',
            'TIMEOUT': 300,
        }
    }
else:
    CACHES = {
        'default': {
            'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
            'LOCATION': 'billing-catalog',
            'TIMEOUT': 300,
        }
    }

REST_FRAMEWORK = {
    # Bill documents carry amounts as JSON numbers, not strings
    'COERCE_DECIMAL_TO_STRING': False,
    'DATETIME_FORMAT': 'iso-8601',
}

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{asctime} {levelname} {name}: {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'loggers': {
        'billing': {
            'handlers': ['console'],
            'level': os.environ.get('BILLING_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}
