from __future__ import annotations

import logging
from typing import Any, Dict

from celery import shared_task

from .models import ExtractionRun
from .services.pipeline import run_extraction

logger = logging.getLogger(__name__)


@shared_task
def execute_extraction_run(run_id: str) -> Dict[str, Any]:
    run = ExtractionRun.objects.select_related("session").filter(id=run_id).first()
    if not run:
        return {"status": "error", "error": "run_not_found"}

    try:
        chapters = run_extraction(run)
    except Exception:
        logger.error("Chapter extraction run %s failed", run_id, exc_info=True)
        return {"status": "error", "error": run.error_message}
    return {"status": "ok", "chapter_count": len(chapters)}
