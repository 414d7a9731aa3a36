from __future__ import annotations

from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError

from apps.assistants.models import AssistantSession
from apps.assistants.services.errors import AssistantServiceError
from apps.assistants.services.resources import AssistantResourceManager


class Command(BaseCommand):
    help = (
        "Delete the remote resources tracked by an assistant session. "
        "With --everything, delete every assistant, file and vector store owned by the session's API key."
    )

    def add_arguments(self, parser):
        parser.add_argument("--session-id", type=str, required=True, help="AssistantSession UUID.")
        parser.add_argument(
            "--everything",
            action="store_true",
            help="Account-wide sweep instead of the session's own resources.",
        )

    def handle(self, *args, **options):
        session_id = str(options.get("session_id", "")).strip()
        try:
            session = AssistantSession.objects.filter(id=session_id).first()
        except ValidationError:
            session = None
        if session is None:
            raise CommandError(f"No assistant session found with id {session_id}.")

        state = session.to_state()
        manager = AssistantResourceManager(state)
        try:
            if options.get("everything"):
                deleted = manager.clear_everything()
                summary = ", ".join(f"{count} {kind}" for kind, count in deleted.items())
                message = f"Deleted {summary}."
            else:
                manager.clear_session()
                message = "Cleared session resources."
        except AssistantServiceError as exc:
            session.apply_state(state)
            raise CommandError(str(exc)) from exc

        session.apply_state(state)
        self.stdout.write(self.style.SUCCESS(message))
