from __future__ import annotations

from rest_framework import serializers

from .models import AssistantSession


class AssistantSessionSerializer(serializers.ModelSerializer):
    owner = serializers.PrimaryKeyRelatedField(read_only=True)
    has_api_key = serializers.BooleanField(read_only=True)

    class Meta:
        model = AssistantSession
        fields = [
            "id",
            "owner",
            "title",
            "document_name",
            "has_api_key",
            "file_id",
            "vector_store_id",
            "assistant_id",
            "thread_id",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "document_name",
            "file_id",
            "vector_store_id",
            "assistant_id",
            "thread_id",
            "created_at",
            "updated_at",
        ]
