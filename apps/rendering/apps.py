# apps/rendering/apps.py
from django.apps import AppConfig
import logging

log = logging.getLogger("rendering.apps")


class RenderingConfig(AppConfig):
    name = "apps.rendering"
    label = "rendering"
    verbose_name = "Rendering"

    def ready(self):
        # === Registre des templates + marqueur de schéma ===
        from . import checks  # noqa: F401  (enregistre les system checks)
        from .components import registry
        from .schema import version

        reg, warns = registry.build_registry()
        for w in warns:
            log.warning(w)

        marker = version.schema_version(reg.latest_migration())
        reg.set_resource_version(version.resource_version(marker))
        registry.install(reg)
        log.info(
            "Rendering ready: %d page template(s), %d component template(s), schema %s",
            len(reg.pages),
            len(reg.components),
            marker.isoformat(),
        )
