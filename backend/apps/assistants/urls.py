from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import AssistantSessionViewSet

router = DefaultRouter()
router.register("sessions", AssistantSessionViewSet, basename="assistant-session")

urlpatterns = [
    path("", include(router.urls)),
]
