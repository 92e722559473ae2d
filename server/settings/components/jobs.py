"""Background job queue settings."""

from server.settings.components import config

JOBS_REDIS_URL = config('JOBS_REDIS_URL', default='redis://localhost:6379/0')

# Queue names shared with the worker
JOBS_FILE_QUEUE = config('JOBS_FILE_QUEUE', default='fileQueue')
JOBS_USER_QUEUE = config('JOBS_USER_QUEUE', default='userQueue')

# Seconds a worker blocks waiting for the next job
JOBS_POP_TIMEOUT = config('JOBS_POP_TIMEOUT', cast=int, default=5)
