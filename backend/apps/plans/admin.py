from django.contrib import admin

from .models import Chapter, ExtractionRun


@admin.register(ExtractionRun)
class ExtractionRunAdmin(admin.ModelAdmin):
    list_display = ("id", "session", "status", "chapter_count", "created_at", "finished_at")
    list_filter = ("status",)


@admin.register(Chapter)
class ChapterAdmin(admin.ModelAdmin):
    list_display = ("session", "number", "name", "done", "updated_at")
    search_fields = ("name",)
    list_filter = ("done",)
