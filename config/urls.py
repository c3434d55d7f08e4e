# config/urls.py
from django.urls import include, path

from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

urlpatterns = [
    # OpenAPI
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),

    # Primary versioned API
    path("api/v1/", include("lm_core.api.urls")),

    # Backwards-compatible alias. Keep AFTER schema/docs so those explicit routes win.
    path("api/", include(("lm_core.api.urls", "legacy"), namespace="legacy")),
]
