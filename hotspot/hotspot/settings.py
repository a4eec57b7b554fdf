"""Django settings for the hotspot payment backend.

Everything deployment-specific comes from environment variables. A local
``.env`` file is loaded when present so the backend can be started with the
same file the portal templates were configured with.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / '.env')


def env_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def env_list(name, default=''):
    return [item.strip() for item in os.getenv(name, default).split(',') if item.strip()]


SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-me')
DEBUG = env_bool('DEBUG', False)
ALLOWED_HOSTS = env_list('ALLOWED_HOSTS', '*')

INSTALLED_APPS = [
    'core',
    'payments',
]

MIDDLEWARE = [
    'core.middleware.CorsMiddleware',
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
]

ROOT_URLCONF = 'hotspot.urls'
WSGI_APPLICATION = 'hotspot.wsgi.application'

# No relational storage: transactions live in the configured transaction store.
DATABASES = {}

# Routes are declared without trailing slashes to match the portal scripts.
APPEND_SLASH = False

USE_TZ = True
TIME_ZONE = 'UTC'

CACHES = {
    'default': {
        'BACKEND': os.getenv('CACHE_BACKEND', 'django.core.cache.backends.locmem.LocMemCache'),
        'LOCATION': os.getenv('CACHE_LOCATION', 'hotspot-transactions'),
    }
}

# Payment gateway
HEXAI_API_BASE_URL = os.getenv('API_BASE_URL', 'https://hpg-backend-6kzwb.ondigitalocean.app/api/v1')
HEXAI_API_KEY = os.getenv('API_KEY', '')
HEXAI_TIMEOUT = float(os.getenv('HEXAI_TIMEOUT', '30'))

WEBHOOK_SECRET = os.getenv('WEBHOOK_SECRET', '')
# Accept unsigned webhook deliveries when no secret is configured. Only for
# local development against a gateway sandbox that cannot sign requests.
WEBHOOK_ALLOW_UNSIGNED = env_bool('WEBHOOK_ALLOW_UNSIGNED', False)

CURRENCY = os.getenv('CURRENCY', 'GMD')
BUSINESS_NAME = os.getenv('BUSINESS_NAME', 'LE.SS WiFi')
SUCCESS_URL = os.getenv('SUCCESS_URL', 'https://hpg-frontend-m3vhq.ondigitalocean.app/payment/success')
ERROR_URL = os.getenv('ERROR_URL', 'https://hpg-frontend-m3vhq.ondigitalocean.app/payment/error')
CUSTOMER_NAME = os.getenv('CUSTOMER_NAME', 'WiFi Customer')
CUSTOMER_PHONE_REGION = os.getenv('CUSTOMER_PHONE_REGION', 'GM')

CORS_ORIGINS = env_list('CORS_ORIGINS', 'http://localhost,http://127.0.0.1,http://0.0.0.0')

# Shared key for the operator-only transaction listing. Empty disables it.
ADMIN_API_KEY = os.getenv('ADMIN_API_KEY', '')

TRANSACTION_STORE = os.getenv('TRANSACTION_STORE', 'payments.store.InMemoryTransactionStore')
TRANSACTION_CACHE_TIMEOUT = int(os.getenv('TRANSACTION_CACHE_TIMEOUT', str(7 * 24 * 3600)))

LOG_LEVEL = os.getenv('LOG_LEVEL', 'DEBUG' if DEBUG else 'INFO').upper()

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '[{asctime}] {levelname} {name}: {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': LOG_LEVEL,
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
        'urllib3': {
            'level': 'WARNING',
        },
    },
}
