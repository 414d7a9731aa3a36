from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from django.conf import settings
from openai import OpenAI, OpenAIError

from . import client as client_module
from .errors import MissingPrerequisite, RemoteOperationFailed
from .pagination import drain_holding_last
from .session import SessionState

logger = logging.getLogger(__name__)


def open_client(
    state: SessionState,
    client_factory: Optional[Callable[[str], OpenAI]] = None,
) -> OpenAI:
    if not state.api_key:
        raise MissingPrerequisite("No API key validated")
    factory = client_factory or client_module.build_client
    return factory(state.api_key)


def assistant_params() -> Dict[str, Any]:
    return {
        "name": settings.ASSISTANT_NAME,
        "model": settings.ASSISTANT_MODEL,
        "description": settings.ASSISTANT_DESCRIPTION,
        "instructions": settings.ASSISTANT_INSTRUCTIONS,
        "temperature": settings.ASSISTANT_TEMPERATURE,
    }


class AssistantResourceManager:
    """
    Creates and deletes the remote objects behind a session: the uploaded
    file, its vector store, the assistant and the conversation thread.

    Identifiers are recorded on the ``SessionState`` passed in. Every
    operation stops at the first API failure and raises
    ``RemoteOperationFailed``; completed steps are not undone.
    """

    def __init__(
        self,
        state: SessionState,
        client: Optional[OpenAI] = None,
        client_factory: Optional[Callable[[str], OpenAI]] = None,
    ) -> None:
        self.state = state
        self._client = client
        self._client_factory = client_factory

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = open_client(self.state, self._client_factory)
        return self._client

    def upload_document(self, filename: str, content: bytes) -> str:
        """Upload a document for retrieval and index it in a fresh vector store."""
        operation = "uploading file"
        try:
            uploaded = self.client.files.create(file=(filename, content), purpose="assistants")
        except OpenAIError as exc:
            raise RemoteOperationFailed(operation, step="file upload", detail=str(exc)) from exc
        self.state.file_id = uploaded.id
        logger.info("Uploaded %s as file %s", filename, uploaded.id)

        try:
            vector_store = self.client.vector_stores.create(
                name=settings.VECTOR_STORE_NAME,
                file_ids=[uploaded.id],
                expires_after={
                    "anchor": "last_active_at",
                    "days": settings.VECTOR_STORE_EXPIRY_DAYS,
                },
            )
        except OpenAIError as exc:
            raise RemoteOperationFailed(operation, step="vector store creation", detail=str(exc)) from exc
        self.state.vector_store_id = vector_store.id
        logger.info("Created vector store %s for file %s", vector_store.id, uploaded.id)
        return vector_store.id

    def create_assistant(self) -> str:
        if not self.state.file_id:
            raise MissingPrerequisite("No file uploaded")

        params = assistant_params()
        try:
            response = self.client.beta.assistants.create(
                model=params["model"],
                description=params["description"],
                instructions=params["instructions"],
                name=params["name"],
                temperature=params["temperature"],
                tools=[{"type": "file_search"}],
                tool_resources={
                    "file_search": {
                        "vector_store_ids": [self.state.vector_store_id],
                    }
                },
            )
        except OpenAIError as exc:
            raise RemoteOperationFailed("creating assistant", detail=str(exc)) from exc

        if response.id:
            self.state.assistant_id = response.id
            logger.info("Created assistant %s", response.id)
        return self.state.assistant_id

    def clear_session(self) -> None:
        """Delete whatever this session tracks, then forget all four ids."""
        state = self.state
        try:
            if state.thread_id:
                self.client.beta.threads.delete(state.thread_id)
            if state.assistant_id:
                self.client.beta.assistants.delete(state.assistant_id)
            if state.vector_store_id:
                self.client.vector_stores.delete(state.vector_store_id)
            if state.file_id:
                self.client.files.delete(state.file_id)
        except OpenAIError as exc:
            raise RemoteOperationFailed("clearing", detail=str(exc)) from exc

        state.clear_resources()

    def clear_everything(self) -> Dict[str, int]:
        """
        Account-wide sweep: every assistant, every file and every vector store
        owned by the key is deleted, not only the ones this session created.
        """
        deleted = {"assistants": 0, "files": 0, "threads": 0, "vector_stores": 0}
        client = self.client
        try:
            for assistant in drain_holding_last(client.beta.assistants.list()):
                client.beta.assistants.delete(assistant.id)
                deleted["assistants"] += 1

            for file_object in drain_holding_last(client.files.list()):
                client.files.delete(file_object.id)
                deleted["files"] += 1

            # Threads cannot be listed; only the tracked one is removed.
            if self.state.thread_id:
                client.beta.threads.delete(self.state.thread_id)
                self.state.thread_id = ""
                deleted["threads"] += 1

            for vector_store in drain_holding_last(client.vector_stores.list()):
                logger.debug("Deleting vector store %s", vector_store.id)
                client.vector_stores.delete(vector_store.id)
                deleted["vector_stores"] += 1
        except OpenAIError as exc:
            raise RemoteOperationFailed("clearing everything", detail=str(exc)) from exc

        self.state.clear_resources()
        logger.info(
            "Cleared account: %d assistant(s), %d file(s), %d thread(s), %d vector store(s)",
            deleted["assistants"],
            deleted["files"],
            deleted["threads"],
            deleted["vector_stores"],
        )
        return deleted
