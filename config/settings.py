"""
Django settings for Church Expenses project.

For more information on this file, see
https://docs.djangoproject.com/en/4.2/topics/settings/
"""

from pathlib import Path
from decouple import config, Csv
import dj_database_url
import sys


# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent


# =============================================================================
# CORE SETTINGS
# =============================================================================

SECRET_KEY = config('SECRET_KEY', default='django-insecure-change-me-in-production')
DEBUG = config('DEBUG', default=False, cast=bool)
ALLOWED_HOSTS = config('ALLOWED_HOSTS', default='localhost,127.0.0.1', cast=Csv())

# Render.com sets this automatically
RENDER_EXTERNAL_HOSTNAME = config('RENDER_EXTERNAL_HOSTNAME', default=None)
if RENDER_EXTERNAL_HOSTNAME:
    ALLOWED_HOSTS.append(RENDER_EXTERNAL_HOSTNAME)

# Base URL used for links in outgoing emails
APP_BASE_URL = config('APP_BASE_URL', default='http://localhost:8000')


# =============================================================================
# APPLICATION DEFINITION
# =============================================================================

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    # Local apps
    'apps.accounts',
    'apps.expenses',
    'apps.reports',
    'apps.wishlist',
    'apps.notifications',

    # Third-party
    'rest_framework',
    'corsheaders',
    'drf_spectacular',
]

AUTH_USER_MODEL = 'accounts.User'

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'whitenoise.middleware.WhiteNoiseMiddleware',  # Serve static files in production
    'corsheaders.middleware.CorsMiddleware',
    'config.middleware.RouteGateMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'config.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [BASE_DIR / 'templates'],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'config.wsgi.application'


# =============================================================================
# DATABASE
# =============================================================================

# Default to SQLite for simplicity, override with DATABASE_URL
DATABASES = {
    'default': dj_database_url.config(
        default=config('DATABASE_URL', default=f'sqlite:///{BASE_DIR / "db.sqlite3"}'),
        conn_max_age=600,
    )
}


# =============================================================================
# PASSWORD VALIDATION
# =============================================================================

AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator',
     'OPTIONS': {'min_length': 8}},
]


# =============================================================================
# INTERNATIONALIZATION
# =============================================================================

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True


# =============================================================================
# STATIC FILES
# =============================================================================

STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

# WhiteNoise for production static file serving
STATICFILES_STORAGE = 'whitenoise.storage.CompressedManifestStaticFilesStorage'


# =============================================================================
# DEFAULT PRIMARY KEY
# =============================================================================

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# =============================================================================
# DJANGO REST FRAMEWORK
# =============================================================================

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'apps.accounts.authentication.SessionCookieAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.IsAuthenticated',
    ],
    'DEFAULT_SCHEMA_CLASS': 'drf_spectacular.openapi.AutoSchema',
    'EXCEPTION_HANDLER': 'config.exceptions.api_exception_handler',
    'UNAUTHENTICATED_USER': 'django.contrib.auth.models.AnonymousUser',
}


# =============================================================================
# DRF SPECTACULAR (API DOCS)
# =============================================================================

SPECTACULAR_SETTINGS = {
    'TITLE': 'Church Expenses API',
    'DESCRIPTION': 'Expense reimbursement workflow, expense reports and the donation wish list.',
    'VERSION': '1.0.0',
    'SERVE_INCLUDE_SCHEMA': False,
    'COMPONENT_SPLIT_REQUEST': True,
    'SCHEMA_PATH_PREFIX': r'/api/',
}


# =============================================================================
# AUTH SESSIONS & TOKENS
# =============================================================================

AUTH_SESSION_COOKIE_NAME = config('AUTH_SESSION_COOKIE_NAME', default='session')
AUTH_SESSION_TTL_HOURS = config('AUTH_SESSION_TTL_HOURS', default=5, cast=int)

EMAIL_VERIFICATION_TTL_HOURS = config('EMAIL_VERIFICATION_TTL_HOURS', default=24, cast=int)
PASSWORD_RESET_TTL_MINUTES = config('PASSWORD_RESET_TTL_MINUTES', default=60, cast=int)


# =============================================================================
# EXPENSE WORKFLOW
# =============================================================================

EXPENSE_REQUIRE_TWO_STAGE = config('EXPENSE_REQUIRE_TWO_STAGE', default=False, cast=bool)
REMINDER_HOURS = config('REMINDER_HOURS', default=48, cast=int)


# =============================================================================
# WISHLIST
# =============================================================================

WISHLIST_ALLOWED_EMAILS = config('WISHLIST_ALLOWED_EMAILS', default='', cast=Csv())
WISHLIST_ADMIN_USER_IDS = config('WISHLIST_ADMIN_USER_IDS', default='', cast=Csv())
WISHLIST_NOTIFICATION_EMAIL = config('WISHLIST_NOTIFICATION_EMAIL', default='')

WISHLIST_CODE_TTL_MINUTES = config('WISHLIST_CODE_TTL_MINUTES', default=10, cast=int)
WISHLIST_ACCESS_TTL_HOURS = config('WISHLIST_ACCESS_TTL_HOURS', default=4, cast=int)
WISHLIST_CODE_MAX_ATTEMPTS = config('WISHLIST_CODE_MAX_ATTEMPTS', default=5, cast=int)
WISHLIST_CODE_COOKIE_NAME = 'wishlist_code_attempt'
WISHLIST_ACCESS_COOKIE_NAME = 'wishlist_admin_access'

WISHLIST_RATE_LIMIT_COUNT = config('WISHLIST_RATE_LIMIT_COUNT', default=3, cast=int)
WISHLIST_RATE_LIMIT_WINDOW_MINUTES = config('WISHLIST_RATE_LIMIT_WINDOW_MINUTES', default=5, cast=int)


# =============================================================================
# ROUTE GATE
# =============================================================================

ROUTE_GATE_ENABLED = config('ROUTE_GATE_ENABLED', default=True, cast=bool)
ROUTE_GATE_ALLOWED_PATHS = config(
    'ROUTE_GATE_ALLOWED_PATHS',
    default='/,/login,/admin/wishlist',
    cast=Csv()
)
ROUTE_GATE_ALLOWED_PREFIXES = config(
    'ROUTE_GATE_ALLOWED_PREFIXES',
    default='/static,/favicon.ico,/logo.svg,/dmv',
    cast=Csv()
)
ROUTE_GATE_ALLOWED_API_PREFIXES = config(
    'ROUTE_GATE_ALLOWED_API_PREFIXES',
    default='/api/dmv/wishlist,/api/admin/wishlist',
    cast=Csv()
)


# =============================================================================
# EMAIL & SMS
# =============================================================================

EMAIL_BACKEND = config('EMAIL_BACKEND', default='django.core.mail.backends.smtp.EmailBackend')
EMAIL_HOST = config('EMAIL_HOST', default='localhost')
EMAIL_PORT = config('EMAIL_PORT', default=587, cast=int)
EMAIL_HOST_USER = config('EMAIL_HOST_USER', default='')
EMAIL_HOST_PASSWORD = config('EMAIL_HOST_PASSWORD', default='')
EMAIL_USE_TLS = config('EMAIL_USE_TLS', default=True, cast=bool)
DEFAULT_FROM_EMAIL = config('DEFAULT_FROM_EMAIL', default='no-reply@localhost')
DISABLE_EMAIL_NOTIFICATIONS = config('DISABLE_EMAIL_NOTIFICATIONS', default=False, cast=bool)

TWILIO_ACCOUNT_SID = config('TWILIO_ACCOUNT_SID', default='')
TWILIO_AUTH_TOKEN = config('TWILIO_AUTH_TOKEN', default='')
TWILIO_PHONE_NUMBER = config('TWILIO_PHONE_NUMBER', default='')


# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = config('LOG_LEVEL', default='INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{asctime} {levelname} {name} {message}',
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
        'django': {
            'handlers': ['console'],
            'level': 'WARNING',
        },
        'apps': {
            'handlers': ['console'],
            'level': LOG_LEVEL,
            'propagate': False,
        },
        'config': {
            'handlers': ['console'],
            'level': LOG_LEVEL,
            'propagate': False,
        },
    },
}


# =============================================================================
# CORS SETTINGS
# =============================================================================

if DEBUG:
    CORS_ALLOW_ALL_ORIGINS = True
else:
    CORS_ALLOWED_ORIGINS = config(
        'CORS_ALLOWED_ORIGINS',
        default='',
        cast=Csv()
    )
# Session cookie must travel with cross-origin requests
CORS_ALLOW_CREDENTIALS = True


# =============================================================================
# SECURITY SETTINGS (Production)
# =============================================================================

AUTH_SESSION_COOKIE_SECURE = not DEBUG

if not DEBUG:
    # HTTPS settings
    SECURE_SSL_REDIRECT = config('SECURE_SSL_REDIRECT', default=True, cast=bool)
    SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')

    # Cookie settings
    SESSION_COOKIE_SECURE = True
    CSRF_COOKIE_SECURE = True

    # HSTS
    SECURE_HSTS_SECONDS = 31536000  # 1 year
    SECURE_HSTS_INCLUDE_SUBDOMAINS = True
    SECURE_HSTS_PRELOAD = True

# CSRF trusted origins for production
CSRF_TRUSTED_ORIGINS = config(
    'CSRF_TRUSTED_ORIGINS',
    default='',
    cast=Csv()
)
if RENDER_EXTERNAL_HOSTNAME:
    CSRF_TRUSTED_ORIGINS.append(f'https://{RENDER_EXTERNAL_HOSTNAME}')


# =============================================================================
# TESTING
# =============================================================================

if 'pytest' in sys.modules or 'test' in sys.argv:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': BASE_DIR / 'test_db.sqlite3',
        }
    }
    # Faster password hashing for tests
    PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']
    EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
    DISABLE_EMAIL_NOTIFICATIONS = False
    SECURE_SSL_REDIRECT = False
    AUTH_SESSION_COOKIE_SECURE = False
    ROUTE_GATE_ENABLED = False
    TWILIO_ACCOUNT_SID = ''
    TWILIO_AUTH_TOKEN = ''
    WISHLIST_ALLOWED_EMAILS = ['wishlist-admin@example.com']
    WISHLIST_ADMIN_USER_IDS = []
    WISHLIST_NOTIFICATION_EMAIL = 'donations@example.com'
    EXPENSE_REQUIRE_TWO_STAGE = False
