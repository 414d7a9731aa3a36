from django.contrib import admin

from .models import AssistantSession


@admin.register(AssistantSession)
class AssistantSessionAdmin(admin.ModelAdmin):
    list_display = ("title", "owner", "document_name", "assistant_id", "vector_store_id", "updated_at")
    search_fields = ("title", "document_name", "assistant_id", "file_id")
    exclude = ("api_key",)
