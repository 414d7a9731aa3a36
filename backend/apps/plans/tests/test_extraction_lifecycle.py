from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.authtoken.models import Token
from rest_framework.test import APITestCase

from apps.assistants.models import AssistantSession
from apps.assistants.services.errors import MissingPrerequisite
from apps.assistants.tests.fakes import chapter_client
from apps.plans.models import Chapter, ExtractionRun, RunStatus
from apps.plans.services.pipeline import run_extraction
from apps.plans.tasks import execute_extraction_run

BUILD_CLIENT = "apps.assistants.services.client.build_client"
REPLY = "Sure, here is the list.\n1. Foundations\n2. Practice\n\n3. Mastery\n"


class ExtractionLifecycleTests(TestCase):
    def setUp(self):
        self.user = get_user_model().objects.create_user(username="planner", password="pass12345")
        self.session = AssistantSession.objects.create(
            owner=self.user,
            title="Lifecycle",
            api_key="sk-good",
            file_id="file-1",
            vector_store_id="vs-1",
            assistant_id="asst-1",
        )

    @patch(BUILD_CLIENT)
    def test_task_marks_run_completed_and_stores_chapters(self, mock_build_client):
        mock_build_client.return_value = chapter_client(REPLY)
        run = ExtractionRun.objects.create(session=self.session, status=RunStatus.QUEUED)

        result = execute_extraction_run(str(run.id))

        run.refresh_from_db()
        self.assertEqual(result, {"status": "ok", "chapter_count": 3})
        self.assertEqual(run.status, RunStatus.COMPLETED)
        self.assertEqual(run.chapter_count, 3)
        self.assertEqual(run.raw_text, REPLY)
        self.assertIsNotNone(run.finished_at)
        chapters = list(self.session.chapters.order_by("number"))
        self.assertEqual([c.number for c in chapters], [1, 2, 3])
        self.assertEqual(chapters[0].name, "1. Foundations")
        self.assertEqual(chapters[0].topics, [])
        self.assertFalse(chapters[0].done)

    @patch(BUILD_CLIENT)
    def test_new_extraction_replaces_previous_chapters(self, mock_build_client):
        Chapter.objects.create(session=self.session, number=1, name="1. Stale", done=True)
        mock_build_client.return_value = chapter_client("1. Fresh")

        run_extraction(ExtractionRun.objects.create(session=self.session))

        self.assertEqual(list(self.session.chapters.values_list("name", flat=True)), ["1. Fresh"])

    @patch(BUILD_CLIENT)
    def test_empty_reply_marks_run_failed(self, mock_build_client):
        client = chapter_client("unused")
        client.beta.threads.messages.list.return_value = SimpleNamespace(data=[])
        mock_build_client.return_value = client
        run = ExtractionRun.objects.create(session=self.session)

        result = execute_extraction_run(str(run.id))

        run.refresh_from_db()
        self.assertEqual(result["status"], "error")
        self.assertEqual(run.status, RunStatus.FAILED)
        self.assertIn("No data returned", run.error_message)
        self.assertEqual(self.session.chapters.count(), 0)

    @patch("apps.plans.services.pipeline.ChapterExtractionService")
    def test_unexpected_error_marks_run_failed(self, mock_service):
        mock_service.return_value.fetch_chapter_text.side_effect = RuntimeError("sdk shape changed")
        run = ExtractionRun.objects.create(session=self.session)

        with self.assertLogs("apps.plans.tasks", level="ERROR"):
            result = execute_extraction_run(str(run.id))

        run.refresh_from_db()
        self.assertEqual(result, {"status": "error", "error": "sdk shape changed"})
        self.assertEqual(run.status, RunStatus.FAILED)
        self.assertEqual(run.error_message, "sdk shape changed")
        self.assertIsNotNone(run.finished_at)

    @patch("apps.plans.services.pipeline._replace_chapters")
    @patch(BUILD_CLIENT)
    def test_storage_error_marks_run_failed_and_propagates(self, mock_build_client, mock_replace):
        mock_build_client.return_value = chapter_client(REPLY)
        mock_replace.side_effect = RuntimeError("database is locked")
        run = ExtractionRun.objects.create(session=self.session)

        with self.assertRaises(RuntimeError):
            run_extraction(run)

        run.refresh_from_db()
        self.assertEqual(run.status, RunStatus.FAILED)
        self.assertEqual(run.error_message, "database is locked")
        self.assertEqual(run.chapter_count, 0)

    def test_missing_assistant_fails_run(self):
        AssistantSession.objects.filter(id=self.session.id).update(assistant_id="")
        run = ExtractionRun.objects.select_related("session").get(
            id=ExtractionRun.objects.create(session=self.session).id
        )

        with self.assertRaises(MissingPrerequisite):
            run_extraction(run)

        run.refresh_from_db()
        self.assertEqual(run.status, RunStatus.FAILED)
        self.assertEqual(run.error_message, "No assistant created")

    def test_unknown_run_id(self):
        result = execute_extraction_run("00000000-0000-0000-0000-000000000000")
        self.assertEqual(result, {"status": "error", "error": "run_not_found"})


class ExtractionApiTests(APITestCase):
    def setUp(self):
        user_model = get_user_model()
        self.user = user_model.objects.create_user(username="api_user", password="pass12345")
        self.other = user_model.objects.create_user(username="intruder", password="pass12345")
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {Token.objects.create(user=self.user).key}")
        self.session = AssistantSession.objects.create(
            owner=self.user,
            api_key="sk-good",
            file_id="file-1",
            assistant_id="asst-1",
        )

    @patch(BUILD_CLIENT)
    def test_sync_run_returns_completed_run_and_chapters_are_listed(self, mock_build_client):
        mock_build_client.return_value = chapter_client(REPLY)

        response = self.client.post(
            "/api/plans/runs/?sync=1",
            {"session_id": str(self.session.id)},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["status"], RunStatus.COMPLETED)
        self.assertEqual(response.data["chapter_count"], 3)

        listing = self.client.get(f"/api/plans/chapters/?session_id={self.session.id}")
        self.assertEqual(listing.status_code, 200)
        self.assertEqual([item["name"] for item in listing.data], ["1. Foundations", "2. Practice", "3. Mastery"])

    @patch(BUILD_CLIENT)
    def test_sync_run_failure_maps_to_bad_gateway(self, mock_build_client):
        client = chapter_client("unused")
        client.beta.threads.messages.list.return_value = SimpleNamespace(data=[])
        mock_build_client.return_value = client

        response = self.client.post(
            "/api/plans/runs/?sync=1",
            {"session_id": str(self.session.id)},
            format="json",
        )

        self.assertEqual(response.status_code, 502)
        self.assertEqual(ExtractionRun.objects.get().status, RunStatus.FAILED)

    @patch("apps.plans.services.pipeline.ChapterExtractionService")
    def test_sync_run_unexpected_error_returns_failed_run(self, mock_service):
        mock_service.return_value.fetch_chapter_text.side_effect = RuntimeError("sdk shape changed")

        with self.assertLogs("apps.plans.views", level="ERROR"):
            response = self.client.post(
                "/api/plans/runs/?sync=1",
                {"session_id": str(self.session.id)},
                format="json",
            )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["status"], RunStatus.FAILED)
        self.assertEqual(response.data["error_message"], "sdk shape changed")

    @patch("apps.plans.views.execute_extraction_run.delay")
    def test_async_run_is_enqueued(self, mock_delay):
        response = self.client.post("/api/plans/runs/", {"session_id": str(self.session.id)}, format="json")

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["status"], RunStatus.QUEUED)
        mock_delay.assert_called_once_with(response.data["id"])

    def test_run_for_foreign_session_is_rejected(self):
        foreign = AssistantSession.objects.create(owner=self.other, assistant_id="asst-2")
        response = self.client.post("/api/plans/runs/", {"session_id": str(foreign.id)}, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertIn("session_id", response.data)

    def test_chapter_progress_can_be_updated(self):
        chapter = Chapter.objects.create(session=self.session, number=1, name="1. Foundations")

        response = self.client.patch(
            f"/api/plans/chapters/{chapter.id}/",
            {"done": True, "topics": ["Definitions", "History"], "name": "renamed"},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        chapter.refresh_from_db()
        self.assertTrue(chapter.done)
        self.assertEqual(chapter.topics, ["Definitions", "History"])
        self.assertEqual(chapter.name, "1. Foundations")

    def test_chapter_topics_must_be_strings(self):
        chapter = Chapter.objects.create(session=self.session, number=1, name="1. Foundations")
        response = self.client.patch(f"/api/plans/chapters/{chapter.id}/", {"topics": [1, 2]}, format="json")
        self.assertEqual(response.status_code, 400)
