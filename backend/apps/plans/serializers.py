from __future__ import annotations

from rest_framework import serializers

from apps.assistants.models import AssistantSession

from .models import Chapter, ExtractionRun


class ChapterSerializer(serializers.ModelSerializer):
    class Meta:
        model = Chapter
        fields = [
            "id",
            "session",
            "number",
            "name",
            "topics",
            "done",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "session", "number", "name", "created_at", "updated_at"]

    def validate_topics(self, value):
        if not isinstance(value, list) or not all(isinstance(topic, str) for topic in value):
            raise serializers.ValidationError("topics must be a list of strings")
        return value


class ExtractionRunSerializer(serializers.ModelSerializer):
    class Meta:
        model = ExtractionRun
        fields = [
            "id",
            "session",
            "status",
            "raw_text",
            "chapter_count",
            "error_message",
            "created_at",
            "started_at",
            "finished_at",
        ]
        read_only_fields = fields


class ExtractionRunCreateSerializer(serializers.Serializer):
    session_id = serializers.UUIDField(required=True)

    def validate_session_id(self, value):
        qs = AssistantSession.objects.filter(id=value)
        request = self.context.get("request")
        if request:
            qs = qs.filter(owner=request.user)
        if not qs.exists():
            raise serializers.ValidationError("Invalid session_id")
        return value
