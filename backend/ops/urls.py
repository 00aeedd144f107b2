"""
Health probes, mounted under /_health/.

No trailing slashes so load balancer probes hit the views directly.
Keep these internal-only in production.
"""
from django.urls import path

from ops import health

app_name = "ops"

urlpatterns = [
    path("live", health.LivenessView.as_view(), name="live"),
    path("ready", health.ReadinessView.as_view(), name="ready"),
    path("full", health.FullHealthView.as_view(), name="full"),
]
