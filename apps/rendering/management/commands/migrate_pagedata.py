# apps/rendering/management/commands/migrate_pagedata.py
from __future__ import annotations
import json
import sys
from pathlib import Path
from typing import Any, Dict

from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand, CommandError, CommandParser

from apps.rendering.components.registry import get_registry
from apps.rendering.errors import BreakingMigrationError, InvalidSchemaVersion
from apps.rendering.schema.engine import migrate_page
from apps.rendering.schema.version import schema_version


class Command(BaseCommand):
    help = "Migre un fichier JSON de données de page (savedAtVersion) vers une version de schéma et l'affiche."

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument("file", type=str, help="Fichier JSON: PageData ou PageRecord (clé 'data')")
        parser.add_argument("--to", type=str, default=None, help="Version cible ISO-8601 (défaut: version de l'instance)")
        parser.add_argument("--indent", type=int, default=2, help="Indentation JSON de la sortie")

    def handle(self, *args, **options):
        path = Path(options["file"])
        if not path.is_file():
            raise CommandError(f"Fichier introuvable: {path}")
        try:
            payload: Dict[str, Any] = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise CommandError(f"JSON invalide: {e}") from e

        registry = get_registry()
        target = options.get("to") or schema_version(registry.latest_migration()).isoformat()
        is_record = isinstance(payload.get("data"), dict)
        page_data = payload["data"] if is_record else payload

        try:
            migrated = async_to_sync(migrate_page)(page_data, target, registry.migrations)
        except BreakingMigrationError as e:
            self.stderr.write(self.style.ERROR(str(e)))
            # Exit code distinct pour la CI
            sys.exit(2)
        except InvalidSchemaVersion as e:
            raise CommandError(str(e)) from e

        if is_record:
            payload = dict(payload, data=migrated)
        else:
            payload = migrated
        self.stdout.write(json.dumps(payload, indent=options["indent"], ensure_ascii=False, default=str))
