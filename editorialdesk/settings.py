# /home/dork/editorialdesk/editorialdesk/settings.py
"""
Editorial Desk Django settings

CHANGE LOG
----------
2026-02-09 • Add EDITORIAL_HTTP_TIMEOUT (shared by every outbound client).
2026-02-02 • Move gateway + Supabase credentials out of the functions and into env.
- GATEWAY_SECRET / WP_* / SUPABASE_* no longer have in-code fallbacks.
- Missing values surface as a 500 "misconfigured" from the gateway views.
2026-01-26 • Logging → RotatingFileHandler (UTF-8) + console for gateway/newsdesk.
"""

from pathlib import Path
import os
import sys

from dotenv import load_dotenv

# ========= Base / Env =========
BASE_DIR = Path(__file__).resolve().parent.parent

ENV_CANDIDATES = [
    BASE_DIR / ".env",          # Local: project root
    BASE_DIR.parent / ".env",   # Local: repo root (if settings/ nested)
]
for _env in ENV_CANDIDATES:
    if _env.exists():
        load_dotenv(_env)  # never overrides variables already exported
        break
else:
    load_dotenv()  # fallback (no-op if missing)


def _env_bool(name: str, default: str = "False") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str = "") -> list:
    return [v.strip() for v in os.getenv(name, default).split(",") if v.strip()]


DEBUG = _env_bool("DEBUG")

# Test runs (pytest / manage.py test) get a throwaway key instead of failing import.
_TESTING = "pytest" in sys.modules or (len(sys.argv) > 1 and sys.argv[1] == "test")

# ========= Secret Key =========
DJANGO_SECRET_KEY = os.getenv("DJANGO_SECRET_KEY")
if not DJANGO_SECRET_KEY:
    if not (DEBUG or _TESTING):
        raise ValueError("DJANGO_SECRET_KEY must be set in .env file")
    DJANGO_SECRET_KEY = "editorialdesk-insecure-dev-key"
SECRET_KEY = DJANGO_SECRET_KEY

# ========= Hosts / Security =========
ALLOWED_HOSTS = [
    "127.0.0.1",
    "localhost",
    "testserver",
] + _env_list("ADDITIONAL_HOSTS")

SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SESSION_COOKIE_SECURE = not DEBUG
CSRF_COOKIE_SECURE = not DEBUG
SECURE_SSL_REDIRECT = _env_bool("SECURE_SSL_REDIRECT", "False" if (DEBUG or _TESTING) else "True")
SECURE_CONTENT_TYPE_NOSNIFF = True

# ========= Installed apps =========
INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "corsheaders",
    "rest_framework",
    "gateway",
    "newsdesk",
]

# ========= Middleware =========
# CORS middleware stays first so preflights are answered before anything else.
MIDDLEWARE = [
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
]

# ========= URL / Templates / WSGI =========
ROOT_URLCONF = "editorialdesk.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {"context_processors": []},
    },
]

WSGI_APPLICATION = "editorialdesk.wsgi.application"

# ========= Database =========
# Editorial rows live in Supabase; the local DB only backs Django internals.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
        "OPTIONS": {"timeout": 30},
    }
}

# ========= I18N =========
LANGUAGE_CODE = "en-gb"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ========= REST framework (newsdesk API) =========
# Auth is the shared dashboard key (newsdesk.permissions); no sessions/users.
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": ["newsdesk.permissions.HasDashboardKey"],
    "DEFAULT_RENDERER_CLASSES": ["rest_framework.renderers.JSONRenderer"],
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser",
        "rest_framework.parsers.MultiPartParser",
    ],
    "EXCEPTION_HANDLER": "newsdesk.exceptions.editorial_exception_handler",
    "UNAUTHENTICATED_USER": None,
}

# ========= Gateway / dashboard shared config =========
GATEWAY_SECRET = os.getenv("GATEWAY_SECRET", "")
DASHBOARD_KEY = os.getenv("DASHBOARD_KEY", "")
DASHBOARD_URL = os.getenv("DASHBOARD_URL", "http://localhost:5173").rstrip("/")
EDITORIAL_DEFAULT_EDITOR = os.getenv("EDITORIAL_DEFAULT_EDITOR", "dan")
EDITORIAL_HTTP_TIMEOUT = float(os.getenv("EDITORIAL_HTTP_TIMEOUT", "20"))

# ========= WordPress =========
WP_BASE = os.getenv("WP_BASE", "").rstrip("/")
WP_USER = os.getenv("WP_USER", "")
WP_APP_PASSWORD = os.getenv("WP_APP_PASSWORD", "")
WP_AUTHOR_ID = int(os.getenv("WP_AUTHOR_ID", "8"))

# ========= Supabase =========
SUPABASE_URL = os.getenv("SUPABASE_URL", "").rstrip("/")
SUPABASE_SERVICE_KEY = os.getenv("SUPABASE_SERVICE_KEY", "")

# ========= Feedly =========
FEEDLY_TOKEN = os.getenv("FEEDLY_TOKEN", "")
FEEDLY_STREAM_ID = os.getenv("FEEDLY_STREAM_ID", "")

# ========= Telegram =========
TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN", "")
TELEGRAM_CHAT_ID = os.getenv("TELEGRAM_CHAT_ID", "")

# ========= Cloudinary =========
CLOUDINARY_CLOUD_NAME = os.getenv("CLOUDINARY_CLOUD_NAME", "")
CLOUDINARY_UPLOAD_PRESET = os.getenv("CLOUDINARY_UPLOAD_PRESET", "")

# ========= CORS (single source of truth) =========
CORS_ALLOWED_ORIGINS = _env_list(
    "EDITORIAL_ALLOWED_ORIGINS",
    "http://localhost:5173,http://127.0.0.1:5173",
)
CORS_ALLOW_HEADERS = [
    "accept",
    "authorization",
    "content-type",
    "origin",
    "user-agent",
    "x-csrftoken",
    "x-timestamp",      # gateway HMAC
    "x-signature",      # gateway HMAC
    "x-dashboard-key",  # newsdesk + sync/proxy functions
    "x-editor",
]

# ========= Logging =========
LOG_DIR = BASE_DIR / "logs"
LOG_DIR.mkdir(exist_ok=True)

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {module} {process:d} {thread:d} {message}",
            "style": "{",
        },
        "simple": {
            "format": "{levelname} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "file": {
            "level": "INFO",
            "class": "logging.handlers.RotatingFileHandler",
            "filename": LOG_DIR / "editorialdesk.log",
            "maxBytes": 1024 * 1024 * 15,
            "backupCount": 10,
            "formatter": "verbose",
            "encoding": "utf-8",
        },
        "console": {
            "level": "INFO",
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "loggers": {
        "gateway": {
            "handlers": ["file", "console"],
            "level": "INFO",
            "propagate": True,
        },
        "newsdesk": {
            "handlers": ["file", "console"],
            "level": "INFO",
            "propagate": True,
        },
        "django": {
            "handlers": ["file"],
            "level": "ERROR",
            "propagate": True,
        },
    },
}
