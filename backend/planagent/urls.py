from __future__ import annotations

from django.conf import settings
from django.contrib import admin
from django.http import JsonResponse
from django.urls import include, path
from rest_framework.authtoken.views import obtain_auth_token


def health(_request):
    return JsonResponse(
        {
            "status": "ok",
            "assistant": settings.ASSISTANT_NAME,
            "model": settings.ASSISTANT_MODEL,
        }
    )


api_patterns = [
    path("health/", health, name="health"),
    path("auth/token/", obtain_auth_token, name="auth-token"),
    path("assistants/", include("apps.assistants.urls")),
    path("plans/", include("apps.plans.urls")),
]

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include(api_patterns)),
]
