from __future__ import annotations

import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response

from .models import AssistantSession
from .serializers import AssistantSessionSerializer
from .services.credentials import validate_api_key
from .services.errors import (
    AssistantServiceError,
    InvalidCredential,
    MissingPrerequisite,
)
from .services.resources import AssistantResourceManager

logger = logging.getLogger(__name__)


def service_error_response(exc: AssistantServiceError) -> Response:
    if isinstance(exc, (InvalidCredential, MissingPrerequisite)):
        code = status.HTTP_400_BAD_REQUEST
    else:
        code = status.HTTP_502_BAD_GATEWAY
        logger.warning("Assistant service call failed: %s", exc, exc_info=True)
    return Response({"detail": str(exc)}, status=code)


class AssistantSessionViewSet(viewsets.ModelViewSet):
    queryset = AssistantSession.objects.none()
    serializer_class = AssistantSessionSerializer

    def get_queryset(self):
        return AssistantSession.objects.filter(owner=self.request.user).order_by("-created_at")

    def perform_create(self, serializer):
        serializer.save(owner=self.request.user)

    @action(detail=True, methods=["post"], url_path="validate-key")
    def validate_key(self, request, pk=None):
        session = self.get_object()
        api_key = request.data.get("api_key")
        api_key = api_key.strip() if isinstance(api_key, str) else ""
        state = session.to_state()
        try:
            valid = validate_api_key(state, api_key)
        except InvalidCredential as exc:
            return Response({"valid": False, "detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        if not valid:
            return Response({"valid": False, "detail": "api_key is required"}, status=status.HTTP_400_BAD_REQUEST)

        session.apply_state(state)
        return Response({"valid": True})

    @action(
        detail=True,
        methods=["post"],
        url_path="upload",
        parser_classes=[MultiPartParser, FormParser],
    )
    def upload(self, request, pk=None):
        session = self.get_object()
        upload = request.FILES.get("file")
        if upload is None:
            return Response({"detail": "file is required"}, status=status.HTTP_400_BAD_REQUEST)

        state = session.to_state()
        manager = AssistantResourceManager(state)
        try:
            manager.upload_document(upload.name, upload.read())
        except AssistantServiceError as exc:
            # Keep whatever was created before the failure.
            session.apply_state(state)
            return service_error_response(exc)

        session.document_name = upload.name[:255]
        session.save(update_fields=["document_name", "updated_at"])
        session.apply_state(state)
        return Response(AssistantSessionSerializer(session).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="assistant")
    def assistant(self, request, pk=None):
        session = self.get_object()
        state = session.to_state()
        try:
            AssistantResourceManager(state).create_assistant()
        except AssistantServiceError as exc:
            return service_error_response(exc)

        session.apply_state(state)
        return Response(AssistantSessionSerializer(session).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="clear")
    def clear(self, request, pk=None):
        session = self.get_object()
        state = session.to_state()
        try:
            AssistantResourceManager(state).clear_session()
        except AssistantServiceError as exc:
            return service_error_response(exc)

        session.apply_state(state)
        return Response(AssistantSessionSerializer(session).data)

    @action(detail=True, methods=["post"], url_path="clear-everything")
    def clear_everything(self, request, pk=None):
        session = self.get_object()
        state = session.to_state()
        try:
            deleted = AssistantResourceManager(state).clear_everything()
        except AssistantServiceError as exc:
            session.apply_state(state)
            return service_error_response(exc)

        session.apply_state(state)
        data = AssistantSessionSerializer(session).data
        data["deleted"] = deleted
        return Response(data)
