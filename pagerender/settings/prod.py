# pagerender/settings/prod.py
from .base import *  # noqa: F401,F403

DEBUG = False

SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SECURE_CONTENT_TYPE_NOSNIFF = True
SECURE_REFERRER_POLICY = "same-origin"
X_FRAME_OPTIONS = "SAMEORIGIN"  # l'éditeur affiche les rendus .edit dans une iframe

if not RENDERING_SCHEMA_VERSION and not os.path.exists(RENDERING_BUILDDATE_FILE):  # noqa: F405
    # Sans marqueur, le schéma suit la dernière migration connue: on le signale au boot.
    import warnings

    warnings.warn("No schema version marker configured (RENDERING_SCHEMA_VERSION / .builddate).")
