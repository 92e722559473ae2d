"""Infrastructure layer for jobs app.

- Redis backed job queue
- Image thumbnail rendering
"""
