from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict

RESOURCE_FIELDS = ("thread_id", "assistant_id", "vector_store_id", "file_id")


@dataclass
class SessionState:
    """
    Credential plus the identifiers of the remote resources created for one
    session. Empty string means the resource is not tracked.

    Services receive the state explicitly and mutate it in place; the caller
    owns it and decides when to persist it.
    """

    api_key: str = ""
    file_id: str = ""
    vector_store_id: str = ""
    assistant_id: str = ""
    thread_id: str = ""

    def clear_resources(self) -> None:
        for field_name in RESOURCE_FIELDS:
            setattr(self, field_name, "")

    def tracked_resources(self) -> Dict[str, str]:
        return {name: getattr(self, name) for name in RESOURCE_FIELDS if getattr(self, name)}

    def as_dict(self) -> Dict[str, str]:
        return asdict(self)
