"""Tests for the Redis job queue."""

import json
from unittest import mock

import pytest

from server.apps.jobs.infrastructure.queues import RedisJobQueue


@pytest.fixture
def redis_client():
    """Mocked Redis client.

    Returns:
        Mock standing in for redis.Redis.
    """
    return mock.Mock()


def test_push_serializes_json(redis_client):
    """Test jobs are pushed as JSON to the head of the list."""
    queue = RedisJobQueue(redis_client)

    queue.push('fileQueue', {'fileId': '1', 'userId': '2'})

    redis_client.lpush.assert_called_once_with(
        'fileQueue',
        json.dumps({'fileId': '1', 'userId': '2'}),
    )


def test_pop_decodes_json(redis_client):
    """Test jobs are popped from the tail and decoded."""
    redis_client.brpop.return_value = (b'userQueue', b'{"userId": "3"}')
    queue = RedisJobQueue(redis_client)

    assert queue.pop('userQueue', 5) == {'userId': '3'}
    redis_client.brpop.assert_called_once_with(['userQueue'], timeout=5)


def test_pop_timeout(redis_client):
    """Test an empty queue yields None."""
    redis_client.brpop.return_value = None
    queue = RedisJobQueue(redis_client)

    assert queue.pop('userQueue', 1) is None


def test_pop_rejects_non_object(redis_client):
    """Test malformed jobs raise ValueError."""
    redis_client.brpop.return_value = (b'userQueue', b'[1, 2]')
    queue = RedisJobQueue(redis_client)

    with pytest.raises(ValueError, match='not an object'):
        queue.pop('userQueue', 1)


def test_from_url():
    """Test the client is built from a URL."""
    with mock.patch('redis.Redis.from_url') as from_url:
        queue = RedisJobQueue.from_url('redis://localhost:6379/0')

    from_url.assert_called_once_with('redis://localhost:6379/0')
    assert isinstance(queue, RedisJobQueue)


def test_close_disconnects_client(redis_client):
    """Test closing the queue closes the Redis client."""
    queue = RedisJobQueue(redis_client)

    queue.close()

    redis_client.close.assert_called_once_with()
