"""Business logic for jobs app: handlers run by the worker."""
