# asgi.py
# Le pipeline de rendu est asynchrone (fetch concurrents): servir de préférence en ASGI.
import os
from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "pagerender.settings.dev")
application = get_asgi_application()
