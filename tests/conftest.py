"""Shared fixtures for all tests."""

import base64
from io import BytesIO

import pytest
from django.core.cache import caches
from PIL import Image

from server.apps.files.infrastructure.storage import ContentStorage
from server.apps.jobs.dispatcher import JobDispatcher, JobKind
from server.apps.jobs.infrastructure.queues import JobPayload
from server.apps.users.infrastructure.passwords import hash_password
from server.apps.users.infrastructure.sessions import SessionStore
from server.apps.users.models import User


class RecordingQueue:
    """In-memory job queue keeping every pushed job."""

    def __init__(self) -> None:
        self.jobs: list[tuple[str, JobPayload]] = []
        self.closed = False

    def push(self, queue_name: str, payload: JobPayload) -> None:
        self.jobs.append((queue_name, payload))

    def pop(self, queue_name: str, timeout: int) -> JobPayload | None:
        for index, (name, payload) in enumerate(self.jobs):
            if name == queue_name:
                del self.jobs[index]
                return payload
        return None

    def close(self) -> None:
        self.closed = True

    def payloads(self, queue_name: str) -> list[JobPayload]:
        return [payload for name, payload in self.jobs if name == queue_name]


@pytest.fixture(autouse=True)
def content_root(settings, tmp_path):
    """Point content storage at a per-test directory.

    Returns:
        Storage root path.
    """
    root = tmp_path / 'files_manager'
    settings.FOLDER_PATH = str(root)
    settings.JOBS_REDIS_URL = 'redis://localhost:1/0'
    return root


@pytest.fixture
def storage(content_root):
    """Content storage rooted in the test directory.

    Returns:
        ContentStorage instance.
    """
    return ContentStorage(location=str(content_root))


@pytest.fixture
def job_queue():
    """In-memory job queue.

    Returns:
        RecordingQueue instance.
    """
    return RecordingQueue()


@pytest.fixture
def dispatcher(job_queue):
    """Dispatcher writing to the in-memory queue.

    Returns:
        JobDispatcher instance.
    """
    return JobDispatcher(
        queue=job_queue,
        queue_names={
            JobKind.THUMBNAIL: 'fileQueue',
            JobKind.WELCOME: 'userQueue',
        },
    )


@pytest.fixture
def session_store():
    """Session store over a freshly cleared cache.

    Returns:
        SessionStore instance.
    """
    cache = caches['sessions']
    cache.clear()
    return SessionStore(cache=cache, ttl=60)


@pytest.fixture
def user(db):
    """Create test user.

    Returns:
        User instance for testing.
    """
    return User.objects.create(
        email='test@example.com',
        password=hash_password('testpass123'),
    )


@pytest.fixture
def other_user(db):
    """Create second test user for isolation tests.

    Returns:
        Second user instance.
    """
    return User.objects.create(
        email='other@example.com',
        password=hash_password('testpass123'),
    )


@pytest.fixture
def png_bytes():
    """Small PNG image.

    Returns:
        Encoded 40x20 PNG.
    """
    buffer = BytesIO()
    Image.new('RGB', (40, 20), color=(200, 30, 30)).save(buffer, format='PNG')
    return buffer.getvalue()


@pytest.fixture
def png_base64(png_bytes):
    """Small PNG image, base64 encoded as sent by callers.

    Returns:
        Base64 string.
    """
    return base64.b64encode(png_bytes).decode('ascii')
