from __future__ import annotations

import logging
from typing import Callable, List, Optional

from django.db import transaction
from django.utils import timezone

from ..models import Chapter, ExtractionRun, RunStatus
from .chapters import ChapterRecord, parse_chapter_list
from .runs import ChapterExtractionService

logger = logging.getLogger(__name__)


def run_extraction(
    run: ExtractionRun,
    service_factory: Optional[Callable[..., ChapterExtractionService]] = None,
) -> List[Chapter]:
    """
    Execute one extraction run end to end and persist its chapters.

    The session's previous chapters are replaced. Any failure marks the run
    failed and is re-raised to the caller.
    """
    session = run.session
    run.status = RunStatus.RUNNING
    run.started_at = timezone.now()
    run.error_message = ""
    run.save(update_fields=["status", "started_at", "error_message"])

    factory = service_factory or ChapterExtractionService
    try:
        raw_text = factory(session.to_state()).fetch_chapter_text()
        records = parse_chapter_list(raw_text)
        chapters = _replace_chapters(run, records)
    except Exception as exc:
        run.status = RunStatus.FAILED
        run.error_message = str(exc)[:2000] or "Chapter extraction failed"
        run.finished_at = timezone.now()
        run.save(update_fields=["status", "error_message", "finished_at"])
        raise

    run.raw_text = raw_text
    run.chapter_count = len(chapters)
    run.status = RunStatus.COMPLETED
    run.finished_at = timezone.now()
    run.save(update_fields=["raw_text", "chapter_count", "status", "finished_at"])
    logger.info("Extraction run %s stored %d chapter(s)", run.id, len(chapters))
    return chapters


def _replace_chapters(run: ExtractionRun, records: List[ChapterRecord]) -> List[Chapter]:
    with transaction.atomic():
        Chapter.objects.filter(session=run.session).delete()
        return Chapter.objects.bulk_create(
            [
                Chapter(
                    session=run.session,
                    number=record.id,
                    name=record.name,
                    topics=list(record.topics),
                    done=record.done,
                )
                for record in records
            ]
        )
