from __future__ import annotations

from django.conf import settings
from openai import OpenAI


def build_client(api_key: str) -> OpenAI:
    # Failures surface to the caller on the first attempt.
    return OpenAI(
        api_key=api_key,
        timeout=settings.OPENAI_TIMEOUT_SECONDS,
        max_retries=0,
    )
