# pagerender/settings/dev.py
# export DJANGO_SETTINGS_MODULE=pagerender.settings.dev

from .base import *  # noqa: F401,F403

DEBUG = True

ALLOWED_HOSTS = ["127.0.0.1", "localhost", "testserver", ".ngrok.io", ".ngrok-free.app"]

LOG_LEVEL = "DEBUG"
LOGGING["loggers"]["rendering"]["level"] = LOG_LEVEL  # noqa: F405
