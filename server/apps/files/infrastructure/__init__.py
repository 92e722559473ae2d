"""Infrastructure layer for files app.

This package contains integrations with external systems:
- Local filesystem storage for file content
- Content type detection

Keep infrastructure concerns separate from business logic.
"""
