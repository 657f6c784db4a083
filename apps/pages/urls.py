# apps/pages/urls.py
from django.urls import re_path

from . import views

app_name = "pages"
urlpatterns = [
    re_path(r"^\.preview/(?P<pagetree_id>[^/]+)/(?P<version>[^/]+)/(?P<path>.*)$", views.preview, name="preview"),
    re_path(r"^\.edit/(?P<pagetree_id>[^/]+)/(?P<path>.*)$", views.edit, name="edit"),
    re_path(r"^\.resources/(?P<version>[^/]+)/(?P<file>[^/]+)$", views.resource, name="resources"),
    # catch-all: doit rester en dernier
    re_path(r"^(?P<path>.*)$", views.launched, name="launched"),
]
