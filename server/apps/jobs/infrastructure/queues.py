"""Redis backed job queue.

Jobs are JSON objects pushed to the head of a Redis list and popped
from its tail, so each list is processed in FIFO order.
"""

import json
import logging
from typing import Any, Protocol, final

import redis
from django.conf import settings

logger = logging.getLogger(__name__)

JobPayload = dict[str, Any]


class JobQueue(Protocol):
    """Anything jobs can be pushed to and popped from."""

    def push(self, queue_name: str, payload: JobPayload) -> None:
        """Append a job to a queue."""

    def pop(self, queue_name: str, timeout: int) -> JobPayload | None:
        """Take the oldest job, None when nothing arrived in time."""

    def close(self) -> None:
        """Release connections held by the queue."""


@final
class RedisJobQueue:
    """Job queue on top of Redis lists."""

    def __init__(self, client: redis.Redis) -> None:
        """Initialize the queue.

        Args:
            client: Redis client used for every operation.
        """
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> 'RedisJobQueue':
        """Create a queue connected to the given Redis URL."""
        return cls(redis.Redis.from_url(url))

    def push(self, queue_name: str, payload: JobPayload) -> None:
        """Append a job to a queue.

        Args:
            queue_name: Redis list name.
            payload: JSON serializable job data.

        Raises:
            redis.RedisError: If Redis is unreachable.
        """
        self._client.lpush(queue_name, json.dumps(payload))
        logger.debug('Job pushed to %s: %s', queue_name, payload)

    def pop(self, queue_name: str, timeout: int) -> JobPayload | None:
        """Take the oldest job from a queue.

        Args:
            queue_name: Redis list name.
            timeout: Seconds to block waiting for a job.

        Returns:
            Decoded job data, None if the timeout elapsed.

        Raises:
            ValueError: If the stored job is not a JSON object.
        """
        popped = self._client.brpop([queue_name], timeout=timeout)
        if popped is None:
            return None

        _, raw_payload = popped
        payload = json.loads(raw_payload)
        if not isinstance(payload, dict):
            raise ValueError(f'Job is not an object: {payload!r}')
        return payload

    def close(self) -> None:
        """Disconnect the Redis client and its connection pool."""
        self._client.close()


def get_job_queue() -> RedisJobQueue:
    """Build the job queue configured in settings."""
    return RedisJobQueue.from_url(settings.JOBS_REDIS_URL)
