"""Management command printing user and file counts."""

import json
from typing import Any

from django.core.management.base import BaseCommand

from server.apps.files.logic.file_operations import count_files
from server.apps.users.logic.user_operations import count_users


class Command(BaseCommand):
    """Print the number of users and files as JSON."""

    help = 'Show the number of registered users and stored files'

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the command.

        Args:
            args: Positional arguments (unused).
            options: Command options (unused).
        """
        stats = {
            'users': count_users(),
            'files': count_files(),
        }
        self.stdout.write(json.dumps(stats))
