from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    # Operations endpoints
    path("_health/", include("ops.urls")),

    # Admin and API
    path("admin/", admin.site.urls),
    path("api/", include("accounting.urls")),
    path("api/settings/", include("preferences.urls")),
]
