#!/usr/bin/env python
"""
Django's command-line utility for administrative tasks.

NexusFlow - project boards
"""

import os
import sys


def main():
    """Run administrative tasks."""

    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Are you sure it's installed and "
            "available on your PYTHONPATH environment variable? Did you "
            "forget to activate a virtual environment?"
        ) from exc

    # Shortcut: migrate and load demo data in one go
    if len(sys.argv) > 1 and sys.argv[1] == 'setup':
        import django
        from django.core.management import call_command

        django.setup()
        print("🚀 Setting up NexusFlow...")
        call_command('migrate', interactive=False)
        call_command('seed')
        print("✅ Setup complete")
        return

    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
