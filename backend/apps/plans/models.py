from __future__ import annotations

import uuid

from django.db import models

from apps.assistants.models import AssistantSession


class RunStatus(models.TextChoices):
    QUEUED = "queued", "Queued"
    RUNNING = "running", "Running"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"


class ExtractionRun(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    session = models.ForeignKey(AssistantSession, on_delete=models.CASCADE, related_name="extraction_runs")
    status = models.CharField(max_length=16, choices=RunStatus.choices, default=RunStatus.QUEUED)

    raw_text = models.TextField(blank=True, default="")
    chapter_count = models.PositiveIntegerField(default=0)
    error_message = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    started_at = models.DateTimeField(null=True, blank=True)
    finished_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["session", "created_at"], name="plans_run_session_created_idx"),
        ]

    def __str__(self) -> str:
        return f"Chapter extraction for {self.session_id} ({self.status})"


class Chapter(models.Model):
    session = models.ForeignKey(AssistantSession, on_delete=models.CASCADE, related_name="chapters")
    number = models.PositiveIntegerField()
    name = models.TextField()
    topics = models.JSONField(default=list, blank=True)
    done = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ("session", "number")
        ordering = ["session", "number"]

    def __str__(self) -> str:
        return f"{self.session_id}: {self.name}"
