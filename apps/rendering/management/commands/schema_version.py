# apps/rendering/management/commands/schema_version.py
from __future__ import annotations
from django.core.management.base import BaseCommand

from apps.rendering.components.registry import get_registry
from apps.rendering.schema.version import resource_version, schema_version


class Command(BaseCommand):
    help = "Affiche le marqueur de schéma attendu par cette instance et la version des ressources."

    def handle(self, *args, **options):
        marker = schema_version(get_registry().latest_migration())
        self.stdout.write(f"schema_version: {marker.isoformat()}")
        self.stdout.write(f"resource_version: {resource_version(marker)}")
