import os
from pathlib import Path
from dotenv import load_dotenv
import dj_database_url

BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(os.path.join(BASE_DIR, '.env'))

SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
DEBUG = os.getenv('DEBUG', 'True') == 'True'
ALLOWED_HOSTS = os.getenv('ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',')

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'rest_framework',
    'corsheaders',
    'drf_spectacular',
    'generation_status',
]

MIDDLEWARE = [
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'ugcflow.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
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

WSGI_APPLICATION = 'ugcflow.wsgi.application'

DB_CONN_MAX_AGE = int(os.getenv('DB_CONN_MAX_AGE', '600'))
DB_SSL_REQUIRE = os.getenv('DB_SSL_REQUIRE', 'False') == 'True'
RUN_TASK_INLINE = os.getenv('RUN_TASK_INLINE', 'False') == 'True'
PGHOST = os.getenv('PGHOST')
PGPORT = os.getenv('PGPORT', '5432')
PGUSER = os.getenv('PGUSER')
PGPASSWORD = os.getenv('PGPASSWORD')
PGDATABASE = os.getenv('PGDATABASE')

if PGHOST and PGUSER and PGPASSWORD and PGDATABASE:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.postgresql',
            'NAME': PGDATABASE,
            'USER': PGUSER,
            'PASSWORD': PGPASSWORD,
            'HOST': PGHOST,
            'PORT': PGPORT,
            'CONN_MAX_AGE': DB_CONN_MAX_AGE,
            'OPTIONS': {
                'sslmode': 'require' if DB_SSL_REQUIRE else 'prefer'
            }
        }
    }
else:
    DATABASES = {
        'default': dj_database_url.parse(
            os.getenv('DATABASE_URL', f'sqlite:///{BASE_DIR / "db.sqlite3"}'),
            conn_max_age=DB_CONN_MAX_AGE,
            ssl_require=DB_SSL_REQUIRE,
        )
    }

AUTH_PASSWORD_VALIDATORS = []

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'generation_status.auth.WebhookSecretAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.IsAuthenticated',
    ],
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
    'DEFAULT_PARSER_CLASSES': [
        'rest_framework.parsers.JSONParser',
    ],
    'UNAUTHENTICATED_USER': None,
    'EXCEPTION_HANDLER': 'generation_status.exceptions.webhook_exception_handler',
    'DEFAULT_SCHEMA_CLASS': 'drf_spectacular.openapi.AutoSchema',
    'TEST_REQUEST_DEFAULT_FORMAT': 'json',
}

# Shared secrets accepted in X-Api-Key. More than one value may be active while
# a secret is being rotated.
WEBHOOK_SECRETS = [s.strip() for s in os.getenv('WEBHOOK_SECRETS', os.getenv('N8N_WEBHOOK_SECRET', '')).split(',') if s.strip()]
WEBHOOK_RATE_LIMIT = int(os.getenv('WEBHOOK_RATE_LIMIT', '100'))
WEBHOOK_RATE_WINDOW = int(os.getenv('WEBHOOK_RATE_WINDOW', '60'))
WEBHOOK_THROTTLE_CACHE = os.getenv('WEBHOOK_THROTTLE_CACHE', 'webhook_throttle')
WEBHOOK_INFER_STAGE = os.getenv('WEBHOOK_INFER_STAGE', 'True') == 'True'
WEBHOOK_ATOMIC_UPDATES = os.getenv('WEBHOOK_ATOMIC_UPDATES', 'False') == 'True'

THROTTLE_REDIS_URL = os.getenv('THROTTLE_REDIS_URL')

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
    },
    'webhook_throttle': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'webhook-throttle',
    },
}

if THROTTLE_REDIS_URL:
    CACHES['webhook_throttle'] = {
        'BACKEND': 'django.core.cache.backends.redis.RedisCache',
        'LOCATION': THROTTLE_REDIS_URL,
        'KEY_PREFIX': 'ugcflow',
    }

CELERY_BROKER_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')
CELERY_RESULT_BACKEND = os.getenv('REDIS_URL', 'redis://localhost:6379/0')
CELERY_ACCEPT_CONTENT = ['json']
CELERY_TASK_SERIALIZER = 'json'
CELERY_RESULT_SERIALIZER = 'json'
CELERY_TIMEZONE = 'UTC'

CORS_ALLOWED_ORIGINS = [
    o.strip() for o in os.getenv('CORS_ALLOWED_ORIGINS', 'http://localhost:3000,http://localhost:8080').split(',') if o.strip()
]
CORS_ALLOW_HEADERS = [
    'accept',
    'authorization',
    'content-type',
    'origin',
    'x-api-key',
    'x-client-info',
    'apikey',
]
CORS_ALLOW_METHODS = ['GET', 'POST', 'OPTIONS']

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {'format': '%(asctime)s %(levelname)s %(name)s %(message)s'},
    },
    'handlers': {
        'console': {'class': 'logging.StreamHandler', 'formatter': 'simple'},
    },
    'root': {'handlers': ['console'], 'level': 'INFO'},
    'loggers': {
        'generation_status': {
            'handlers': ['console'],
            'level': os.getenv('LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}

SPECTACULAR_SETTINGS = {
    'TITLE': 'ugcflow webhook API',
    'DESCRIPTION': 'Status callbacks for frame, speech, lip-sync and animation jobs. Updates file records and the pipelines they belong to.',
    'VERSION': '1.0.0',
    'SERVERS': [{'url': 'http://127.0.0.1:8000', 'description': 'Local'}],
    'COMPONENT_SPLIT_REQUEST': True,
    'SERVE_INCLUDE_SCHEMA': False,
    'SECURITY': [{'ApiKey': []}],
    'SECURITY_SCHEMES': {
        'ApiKey': {
            'type': 'apiKey',
            'name': 'X-Api-Key',
            'in': 'header',
            'description': 'Shared webhook secret in X-Api-Key header',
        }
    },
    'TAGS': [
        {'name': 'Webhooks', 'description': 'Generation status callbacks'},
        {'name': 'System', 'description': 'Service health'},
    ],
    'SWAGGER_UI_SETTINGS': {
        'deepLinking': True,
        'persistAuthorization': True,
        'displayOperationId': True,
        'docExpansion': 'none',
    },
}
