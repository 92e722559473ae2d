"""Management command running the background job worker."""

import logging
import time
from collections.abc import Callable
from typing import Any, Final

import redis
from django.conf import settings
from django.core.management.base import BaseCommand

from server.apps.jobs.infrastructure.queues import JobPayload, get_job_queue
from server.apps.jobs.logic.handlers import (
    JobError,
    process_thumbnail_job,
    process_welcome_job,
)

_QUEUE_CHOICES: Final = ('file', 'user')

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Consume jobs from a queue and run their handler."""

    help = 'Process background jobs (thumbnails or welcome notifications)'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--queue',
            choices=_QUEUE_CHOICES,
            required=True,
            help='Queue to consume: file (thumbnails) or user (welcome)',
        )
        parser.add_argument(
            '--once',
            action='store_true',
            help='Stop as soon as the queue is empty',
        )
        parser.add_argument(
            '--max-jobs',
            type=int,
            default=None,
            help='Stop after this many jobs',
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the worker loop.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        queue_name, handler = self._resolve(options['queue'])
        once = options['once']
        max_jobs = options['max_jobs']

        queue = get_job_queue()
        timeout = settings.JOBS_POP_TIMEOUT

        self.stdout.write(f'Waiting for jobs on {queue_name}')

        processed = 0
        failed = 0
        try:
            while max_jobs is None or processed + failed < max_jobs:
                try:
                    payload = queue.pop(queue_name, timeout)
                except ValueError:
                    logger.exception(
                        'Discarding malformed job on %s',
                        queue_name,
                    )
                    failed += 1
                    continue
                except redis.RedisError:
                    logger.exception('Cannot pop jobs from %s', queue_name)
                    failed += 1
                    if once:
                        break
                    # Back off instead of spinning while Redis is down
                    time.sleep(timeout)
                    continue

                if payload is None:
                    if once:
                        break
                    continue

                if self._run(handler, payload, queue_name):
                    processed += 1
                else:
                    failed += 1
        finally:
            queue.close()

        self.stdout.write(
            self.style.SUCCESS(
                f'Processed {processed} jobs, {failed} failed',
            ),
        )

    def _run(
        self,
        handler: Callable[[JobPayload], object],
        payload: JobPayload,
        queue_name: str,
    ) -> bool:
        try:
            handler(payload)
        except JobError as exc:
            self.stderr.write(f'Job failed: {exc} ({payload})')
            logger.warning('Job failed on %s: %s', queue_name, exc)
            return False
        except Exception as exc:
            # Any failure stays confined to its job
            self.stderr.write(f'Job crashed: {exc!r} ({payload})')
            logger.exception('Job crashed on %s: %s', queue_name, payload)
            return False
        return True

    def _resolve(
        self,
        queue: str,
    ) -> tuple[str, Callable[[JobPayload], object]]:
        if queue == 'file':
            return settings.JOBS_FILE_QUEUE, process_thumbnail_job
        return settings.JOBS_USER_QUEUE, process_welcome_job
