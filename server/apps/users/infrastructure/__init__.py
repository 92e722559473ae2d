"""Infrastructure layer for users app.

- Password digests
- Session token store backed by the Django cache framework
"""
