"""Business logic layer for files app.

This package contains all business logic for file operations:
- Payload validation into typed creation parameters
- File and folder creation, lookup and paginated listing
- Visibility changes and content retrieval

All business logic should be implemented here, separate from
models (data layer) and infrastructure (external systems).
"""
