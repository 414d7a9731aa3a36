import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "planagent.settings")

app = Celery("planagent")
app.config_from_object("django.conf:settings", namespace="CELERY")
# Extraction tasks spend most of their time polling a remote run.
app.conf.worker_prefetch_multiplier = 1
app.conf.task_track_started = True
app.autodiscover_tasks(["apps.plans"])
