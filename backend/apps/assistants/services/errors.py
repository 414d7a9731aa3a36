from __future__ import annotations

from typing import Optional


class AssistantServiceError(Exception):
    """Base class for every failure raised by the assistant services."""


class InvalidCredential(AssistantServiceError):
    def __init__(self, message: str = "Invalid API key") -> None:
        super().__init__(message)


class MissingPrerequisite(AssistantServiceError):
    """A resource the operation depends on has not been created yet."""


class RemoteOperationFailed(AssistantServiceError):
    """
    A call to the OpenAI API failed. The SDK exception is kept as
    ``__cause__``; ``operation`` and ``step`` say where it happened.
    """

    def __init__(self, operation: str, step: Optional[str] = None, detail: str = "") -> None:
        self.operation = operation
        self.step = step
        message = f"Error {operation}"
        if step:
            message += f" ({step})"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class NoDataReturned(AssistantServiceError):
    def __init__(self, message: str = "Error extracting chapters: No data returned") -> None:
        super().__init__(message)


class RunPollTimeout(AssistantServiceError):
    def __init__(self, run_id: str, attempts: int, elapsed: float) -> None:
        self.run_id = run_id
        self.attempts = attempts
        self.elapsed = elapsed
        super().__init__(f"Run {run_id} still pending after {attempts} poll(s) ({elapsed:.1f}s)")
