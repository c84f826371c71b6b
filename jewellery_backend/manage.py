"""
PATH: manage.py

Django management entrypoint.

Key safeguard:
- If DJANGO_SETTINGS_MODULE is unset OR incorrectly set to the settings *package*
  ("backend.settings"), we force it to a concrete module:
  backend.settings.test for `manage.py test`, backend.settings.dev otherwise.

Production:
- Production must set DJANGO_SETTINGS_MODULE=backend.settings.prod explicitly.
  We respect that.

Bootstrap admin:
- If RUN_CREATE_SUPERUSER=True and AUTO_ADMIN_EMAIL / AUTO_ADMIN_PASSWORD are set,
  an admin account is created once (idempotent).
"""

from __future__ import annotations

import os
import sys


def _ensure_settings_module() -> None:
    current = (os.environ.get("DJANGO_SETTINGS_MODULE") or "").strip()

    if not current or current == "backend.settings":
        target = "backend.settings.test" if "test" in sys.argv[1:2] else "backend.settings.dev"
        os.environ["DJANGO_SETTINGS_MODULE"] = target


def _create_superuser_if_requested() -> None:
    if os.environ.get("RUN_CREATE_SUPERUSER") != "True":
        return

    email = (os.environ.get("AUTO_ADMIN_EMAIL") or "").strip()
    password = os.environ.get("AUTO_ADMIN_PASSWORD") or ""
    if not email or not password:
        print("RUN_CREATE_SUPERUSER set but AUTO_ADMIN_EMAIL / AUTO_ADMIN_PASSWORD missing; skipping.")
        return

    import django
    django.setup()

    from django.contrib.auth import get_user_model

    User = get_user_model()

    if not User.objects.filter(email=email).exists():
        User.objects.create_superuser(email=email, password=password)
        print("Superuser created.")
    else:
        print("Superuser already exists.")


def main() -> None:
    _ensure_settings_module()

    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Are you sure it's installed and "
            "available on your PYTHONPATH environment variable? Did you "
            "forget to activate a virtual environment?"
        ) from exc

    _create_superuser_if_requested()

    execute_from_command_line(sys.argv)


if __name__ == "__main__":
    main()
