from __future__ import annotations

import uuid

from django.conf import settings
from django.db import models

from .services.session import SessionState

STATE_FIELDS = ("api_key", "file_id", "vector_store_id", "assistant_id", "thread_id")


class AssistantSession(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assistant_sessions",
    )
    title = models.CharField(max_length=160, blank=True, default="")
    document_name = models.CharField(max_length=255, blank=True, default="")

    api_key = models.CharField(max_length=255, blank=True, default="")
    file_id = models.CharField(max_length=128, blank=True, default="")
    vector_store_id = models.CharField(max_length=128, blank=True, default="")
    assistant_id = models.CharField(max_length=128, blank=True, default="")
    thread_id = models.CharField(max_length=128, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.title or 'Session'} ({self.id})"

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    def to_state(self) -> SessionState:
        return SessionState(**{name: getattr(self, name) for name in STATE_FIELDS})

    def apply_state(self, state: SessionState) -> None:
        for name in STATE_FIELDS:
            setattr(self, name, getattr(state, name))
        self.save(update_fields=list(STATE_FIELDS) + ["updated_at"])
