"""
Celery configuration for the Newsroom project.

The only periodic job is the event status refresh (see CELERY_BEAT_SCHEDULE);
it runs on its own `events` queue so a backlog there never delays anything
else.
"""

import logging
import os

from celery import Celery
from celery.signals import task_prerun, task_postrun

# Set default Django settings module
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

logger = logging.getLogger(__name__)

app = Celery('newsroom')

# Load configuration from Django settings with CELERY namespace
app.config_from_object('django.conf:settings', namespace='CELERY')

# Auto-discover tasks from all installed apps
app.autodiscover_tasks()

app.conf.task_routes = {
    'apps.events.tasks.*': {'queue': 'events'},
}
app.conf.task_default_queue = 'default'


@task_prerun.connect
def bind_task_request_id(task_id, task, args, kwargs, **signal_kwargs):
    """Give each task run a request id so its log lines can be correlated."""
    from apps.core.middleware import setup_celery_request_context

    setup_celery_request_context(getattr(task.request, 'headers', None))


@task_postrun.connect
def unbind_task_request_id(task_id, task, args, kwargs, retval, state, **signal_kwargs):
    from apps.core.middleware import clear_request_context

    clear_request_context()
