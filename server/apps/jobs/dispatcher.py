"""Post-processing dispatcher.

Enqueues background jobs after requests succeed. Enqueueing is best
effort: a failure is logged and never turns a successful request into a
failed one.
"""

import enum
import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import final

from django.conf import settings

from server.apps.jobs.infrastructure.queues import (
    JobPayload,
    JobQueue,
    get_job_queue,
)

logger = logging.getLogger(__name__)


class JobKind(enum.StrEnum):
    """Kinds of background jobs."""

    THUMBNAIL = 'thumbnail'
    WELCOME = 'welcome'


@final
class JobDispatcher:
    """Routes jobs of each kind to their queue."""

    def __init__(
        self,
        queue: JobQueue,
        queue_names: Mapping[JobKind, str],
    ) -> None:
        """Initialize the dispatcher.

        Args:
            queue: Queue backend.
            queue_names: Queue name for each job kind.
        """
        self._queue = queue
        self._queue_names = dict(queue_names)

    def enqueue(self, kind: JobKind, payload: JobPayload) -> bool:
        """Submit a job without waiting for it to run.

        Args:
            kind: Job kind, selects the queue.
            payload: Job data.

        Returns:
            True if the job was accepted by the queue.
        """
        queue_name = self._queue_names[kind]
        try:
            self._queue.push(queue_name, payload)
        except Exception:
            # Post-processing is best effort, the request outcome stands
            logger.exception(
                'Failed to enqueue %s job on %s: %s',
                kind,
                queue_name,
                payload,
            )
            return False

        logger.info('Enqueued %s job on %s', kind, queue_name)
        return True

    def enqueue_thumbnail(
        self,
        user_id: int,
        file_id: int | None = None,
    ) -> bool:
        """Ask for thumbnails of an image.

        Without ``file_id`` the job only records a failed image upload
        and is rejected by the worker.
        """
        payload: JobPayload = {'userId': str(user_id)}
        if file_id is not None:
            payload['fileId'] = str(file_id)
        return self.enqueue(JobKind.THUMBNAIL, payload)

    def enqueue_welcome(self, user_id: int) -> bool:
        """Ask for the welcome notification of a new user."""
        return self.enqueue(JobKind.WELCOME, {'userId': str(user_id)})

    def close(self) -> None:
        """Release the queue connections, failures are only logged."""
        try:
            self._queue.close()
        except Exception:
            logger.exception('Failed to close job queue')


def get_dispatcher() -> JobDispatcher:
    """Build the dispatcher configured in settings."""
    return JobDispatcher(
        queue=get_job_queue(),
        queue_names={
            JobKind.THUMBNAIL: settings.JOBS_FILE_QUEUE,
            JobKind.WELCOME: settings.JOBS_USER_QUEUE,
        },
    )


@contextmanager
def dispatcher_scope(
    dispatcher: JobDispatcher | None = None,
) -> Iterator[JobDispatcher]:
    """Provide a dispatcher for the duration of one operation.

    A dispatcher passed in by the caller is used as is and stays open.
    Otherwise one is built from settings and closed on exit.
    """
    if dispatcher is not None:
        yield dispatcher
        return

    owned_dispatcher = get_dispatcher()
    try:
        yield owned_dispatcher
    finally:
        owned_dispatcher.close()
