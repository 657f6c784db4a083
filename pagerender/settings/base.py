# pagerender/settings/base.py
from __future__ import annotations
import os
from pathlib import Path

from dotenv import load_dotenv, find_dotenv

_dotenv_path = find_dotenv(filename=os.getenv("DOTENV_FILE", ".env"), usecwd=True)
if _dotenv_path:
    load_dotenv(_dotenv_path, override=False)

BASE_DIR = Path(__file__).resolve().parents[2]  # .../pagerender

_TRUE_VALUES = {"1", "true", "yes", "y", "on"}


def env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return bool(default)
    return str(value).strip().lower() in _TRUE_VALUES


# --------------------------------------------------------------------------------------
# Clés & debug
# --------------------------------------------------------------------------------------
SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME_DEV_ONLY")
DEBUG = False  # Par défaut: sécurisé. dev.py le passera à True.

ALLOWED_HOSTS: list[str] = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "").split(",") if h.strip()]

# --------------------------------------------------------------------------------------
# Apps
# --------------------------------------------------------------------------------------
DJANGO_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.staticfiles",
]

LOCAL_APPS = [
    "apps.rendering.apps.RenderingConfig",
    "apps.sitekit.apps.SitekitConfig",
    "apps.pages.apps.PagesConfig",
]

INSTALLED_APPS = DJANGO_APPS + LOCAL_APPS

# --------------------------------------------------------------------------------------
# Middleware
# --------------------------------------------------------------------------------------
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "apps.rendering.middleware.request_id.RequestIdMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "pagerender.urls"

# --------------------------------------------------------------------------------------
# Templates
# Les composants rendent leurs fragments via le moteur Django (APP_DIRS).
# --------------------------------------------------------------------------------------
TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [],
        },
    },
]

WSGI_APPLICATION = "pagerender.wsgi.application"
ASGI_APPLICATION = "pagerender.asgi.application"

# Aucun modèle: le rendu ne persiste rien, les pages viennent d'une PageSource.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

# --------------------------------------------------------------------------------------
# I18N / TZ
# --------------------------------------------------------------------------------------
LANGUAGE_CODE = "en"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# --------------------------------------------------------------------------------------
# Static
# --------------------------------------------------------------------------------------
STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

# --------------------------------------------------------------------------------------
# Rendering core
# --------------------------------------------------------------------------------------
RENDERING_CONFIG_FILE = os.getenv(
    "RENDERING_CONFIG_FILE", str(BASE_DIR / "configs" / "rendering" / "templates.yml")
)
# Horodatage ISO du schéma attendu par cette instance (prioritaire sur .builddate)
RENDERING_SCHEMA_VERSION = os.getenv("RENDERING_SCHEMA_VERSION") or None
RENDERING_BUILDDATE_FILE = os.getenv("RENDERING_BUILDDATE_FILE", str(BASE_DIR / ".builddate"))
RENDERING_RESOURCES_URL = "/.resources/"

# --------------------------------------------------------------------------------------
# Pages (couche HTTP)
# --------------------------------------------------------------------------------------
PAGES_PAGE_SOURCE = os.getenv("PAGES_PAGE_SOURCE", "apps.pages.sources.FixturePageSource")
PAGES_FIXTURES_DIR = os.getenv("PAGES_FIXTURES_DIR", str(BASE_DIR / "configs" / "pages"))

# --------------------------------------------------------------------------------------
# Logging (propre, exploitable)
# --------------------------------------------------------------------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "request_id": {"()": "apps.rendering.log_context.RequestIdFilter"},
    },
    "formatters": {
        "simple": {"format": "[{levelname}] {name}: {message}", "style": "{"},
        "verbose": {
            "format": "{asctime} [{levelname}] {name} {module}:{lineno} rid={request_id} - {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "verbose", "filters": ["request_id"]},
    },
    "root": {"handlers": ["console"], "level": LOG_LEVEL},
    "loggers": {
        "django.request": {"handlers": ["console"], "level": "WARNING", "propagate": False},
        "rendering": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "pages": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
    },
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
