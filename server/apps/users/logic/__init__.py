"""Business logic for users app.

- Registration and lookups (user_operations)
- Sign in, sign out and token authentication (session_operations)
"""
