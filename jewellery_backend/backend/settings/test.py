"""
PATH: backend/settings/test.py

TEST SETTINGS
- in-memory sqlite (or TEST_DATABASE_URL)
- fast password hashing
- throttling off
- no outbound gateway credentials
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import LOGGING, REST_FRAMEWORK, env

DEBUG = False

# TEST_DATABASE_URL points the suite at a real server (row-lock tests only run there)
if env("TEST_DATABASE_URL", default=""):
    DATABASES = {"default": env.db("TEST_DATABASE_URL")}
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": ":memory:",
        }
    }

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_CLASSES": (),
}

PAYMENTS = {
    "RAZORPAY": {"KEY_ID": "rzp_test_key", "KEY_SECRET": "test-secret", "TIMEOUT_SECONDS": 5},
    "CURRENCY": "INR",
}

LOGGING = {
    **LOGGING,
    "root": {"handlers": ["console"], "level": "CRITICAL"},
    "loggers": {name: {**cfg, "level": "CRITICAL"} for name, cfg in LOGGING["loggers"].items()},
}
