from __future__ import annotations

import logging
from typing import Callable, Optional

from openai import OpenAI, OpenAIError

from . import client as client_module
from .errors import InvalidCredential
from .session import SessionState

logger = logging.getLogger(__name__)


def validate_api_key(
    state: SessionState,
    api_key: str,
    client_factory: Optional[Callable[[str], OpenAI]] = None,
) -> bool:
    """
    Probe the API with ``models.list()`` using ``api_key``.

    Returns False for an empty key without touching the network. On success
    the key is stored on ``state``. Any API failure (auth, network, rate
    limit) raises ``InvalidCredential``; the cause is chained, not inspected.
    """
    if not api_key:
        return False

    factory = client_factory or client_module.build_client
    client = factory(api_key)
    try:
        client.models.list()
    except OpenAIError as exc:
        logger.info("API key rejected by models probe: %s", type(exc).__name__)
        raise InvalidCredential() from exc

    state.api_key = api_key
    return True
