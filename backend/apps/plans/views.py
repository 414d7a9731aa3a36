from __future__ import annotations

import logging

from rest_framework import mixins, status, viewsets
from rest_framework.response import Response

from apps.assistants.services.errors import AssistantServiceError
from apps.assistants.views import service_error_response

from .models import Chapter, ExtractionRun, RunStatus
from .serializers import ChapterSerializer, ExtractionRunCreateSerializer, ExtractionRunSerializer
from .services.pipeline import run_extraction
from .tasks import execute_extraction_run

logger = logging.getLogger(__name__)


class ExtractionRunViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    queryset = ExtractionRun.objects.none()
    serializer_class = ExtractionRunSerializer

    def get_queryset(self):
        qs = ExtractionRun.objects.filter(session__owner=self.request.user).select_related("session")
        session_id = self.request.query_params.get("session_id")
        if session_id:
            qs = qs.filter(session_id=session_id)
        return qs

    def create(self, request, *args, **kwargs):
        create_serializer = ExtractionRunCreateSerializer(data=request.data, context={"request": request})
        create_serializer.is_valid(raise_exception=True)

        run = ExtractionRun.objects.create(
            session_id=create_serializer.validated_data["session_id"],
            status=RunStatus.QUEUED,
        )

        sync = str(request.query_params.get("sync", "0")).lower() in {"1", "true", "yes"}
        if sync:
            try:
                run_extraction(run)
            except AssistantServiceError as exc:
                return service_error_response(exc)
            except Exception:
                # The run row already carries the failure.
                logger.error("Chapter extraction run %s failed", run.id, exc_info=True)
        else:
            execute_extraction_run.delay(str(run.id))

        return Response(ExtractionRunSerializer(run).data, status=status.HTTP_201_CREATED)


class ChapterViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    queryset = Chapter.objects.none()
    serializer_class = ChapterSerializer

    def get_queryset(self):
        qs = Chapter.objects.select_related("session").filter(session__owner=self.request.user)
        session_id = self.request.query_params.get("session_id")
        if session_id:
            qs = qs.filter(session_id=session_id)
        return qs
