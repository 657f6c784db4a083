# apps/sitekit/apps.py
from django.apps import AppConfig


class SitekitConfig(AppConfig):
    name = "apps.sitekit"
    label = "sitekit"
    verbose_name = "Site kit (templates de base)"
