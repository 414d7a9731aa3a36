from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional

from django.conf import settings
from openai import OpenAI, OpenAIError

from apps.assistants.services.errors import (
    MissingPrerequisite,
    NoDataReturned,
    RemoteOperationFailed,
    RunPollTimeout,
)
from apps.assistants.services.resources import open_client
from apps.assistants.services.session import SessionState

from .chapters import ChapterRecord, parse_chapter_list
from .prompts import CHAPTERS_PLAN_PROMPT, CHAPTERS_RUN_INSTRUCTIONS

logger = logging.getLogger(__name__)


class RunPhase(str, Enum):
    QUEUED = "queued"
    RUNNING = "in_progress"
    CANCELLING = "cancelling"
    TERMINAL = "terminal"

    @classmethod
    def from_status(cls, status: Optional[str]) -> "RunPhase":
        # completed, failed, cancelled, expired, incomplete, requires_action
        # and anything unknown all stop the polling loop.
        for phase in (cls.QUEUED, cls.RUNNING, cls.CANCELLING):
            if status == phase.value:
                return phase
        return cls.TERMINAL

    @property
    def is_pending(self) -> bool:
        return self is not RunPhase.TERMINAL


@dataclass
class PollingPolicy:
    """
    How ``wait_for_run`` paces itself. ``max_attempts`` and ``deadline``
    (seconds) are off by default, which keeps polling until the run leaves
    the pending phases, however long that takes.
    """

    interval: float = 1.0
    max_attempts: Optional[int] = None
    deadline: Optional[float] = None

    @classmethod
    def from_settings(cls) -> "PollingPolicy":
        return cls(
            interval=settings.RUN_POLL_INTERVAL_SECONDS,
            max_attempts=settings.RUN_POLL_MAX_ATTEMPTS or None,
            deadline=settings.RUN_POLL_TIMEOUT_SECONDS or None,
        )


def wait_for_run(
    client: OpenAI,
    run: Any,
    policy: PollingPolicy,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> Any:
    started = clock()
    attempts = 0
    while RunPhase.from_status(run.status).is_pending:
        elapsed = clock() - started
        if policy.max_attempts is not None and attempts >= policy.max_attempts:
            raise RunPollTimeout(run.id, attempts, elapsed)
        if policy.deadline is not None and elapsed >= policy.deadline:
            raise RunPollTimeout(run.id, attempts, elapsed)

        sleep(policy.interval)
        attempts += 1
        run = client.beta.threads.runs.retrieve(run.id, thread_id=run.thread_id)
        logger.debug("Run %s poll %d: %s", run.id, attempts, run.status)
    return run


def message_text(message: Any) -> str:
    return "\n".join(block.text.value for block in message.content if block.type == "text")


class ChapterExtractionService:
    """
    Asks the session's assistant for the book's chapter list.

    A throwaway thread is created per call and always deleted afterwards.
    The run's final status is not checked: a failed or cancelled run still
    reads the thread's latest message, which then usually ends in
    ``NoDataReturned``.
    """

    def __init__(
        self,
        state: SessionState,
        client: Optional[OpenAI] = None,
        policy: Optional[PollingPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
        client_factory: Optional[Callable[[str], OpenAI]] = None,
    ) -> None:
        self.state = state
        self.policy = policy or PollingPolicy.from_settings()
        self._client = client
        self._client_factory = client_factory
        self._sleep = sleep

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = open_client(self.state, self._client_factory)
        return self._client

    def extract_chapters(self) -> List[ChapterRecord]:
        return parse_chapter_list(self.fetch_chapter_text())

    def fetch_chapter_text(self) -> str:
        if not self.state.assistant_id:
            raise MissingPrerequisite("No assistant created")

        client = self.client
        thread_id = ""
        try:
            thread = client.beta.threads.create()
            thread_id = thread.id

            client.beta.threads.messages.create(
                thread_id,
                role="user",
                content=CHAPTERS_PLAN_PROMPT,
            )
            run = client.beta.threads.runs.create(
                thread_id,
                assistant_id=self.state.assistant_id,
                instructions=CHAPTERS_RUN_INSTRUCTIONS,
            )
            run = wait_for_run(client, run, self.policy, sleep=self._sleep)
            if run.status != "completed":
                logger.warning("Run %s finished with status %s; reading latest message anyway", run.id, run.status)

            messages = client.beta.threads.messages.list(thread_id, limit=1, order="desc")
            if not messages.data:
                raise NoDataReturned()
            return message_text(messages.data[0])
        except OpenAIError as exc:
            raise RemoteOperationFailed("extracting chapters", detail=str(exc)) from exc
        finally:
            if thread_id:
                self._delete_thread(thread_id)

    def _delete_thread(self, thread_id: str) -> None:
        try:
            self.client.beta.threads.delete(thread_id)
        except OpenAIError:
            logger.warning("Failed to delete thread %s", thread_id, exc_info=True)
