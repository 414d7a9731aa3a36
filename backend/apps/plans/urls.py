from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import ChapterViewSet, ExtractionRunViewSet

router = DefaultRouter()
router.register("runs", ExtractionRunViewSet, basename="extraction-run")
router.register("chapters", ChapterViewSet, basename="chapter")

urlpatterns = [
    path("", include(router.urls)),
]
