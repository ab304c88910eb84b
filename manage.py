#!/usr/bin/env python
"""Command-line entry point for the clinic records backend.

Besides the stock Django commands this exposes the records maintenance
commands (``ensure_roles``, ``cleanup_appointments``,
``merge_duplicate_patients``) and the legacy migration pair
``create_seeds`` / ``import_seeds``.
"""
import os
import sys


def main() -> None:
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'clinic.settings')
    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Install the project with `pip install -e .` "
            "inside an active virtual environment."
        ) from exc
    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
