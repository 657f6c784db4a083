"""
URL configuration for pagerender project.

Everything is routed to the pages app: the catch-all route renders launched pages,
so it must stay last.
"""
from django.urls import include, path

urlpatterns = [
    path("", include("apps.pages.urls")),
]
