"""
Blood Ledger – Django Settings (Infrastructure Only)
====================================================
Django serves as the HTTP container for the ledger.
The ledger keeps its state in memory; no database is used.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get(
    "BLOODLEDGER_SECRET_KEY", "bloodledger-dev-key-replace-before-deployment",
)

DEBUG = os.environ.get("BLOODLEDGER_DEBUG", "true").lower() in ("1", "true", "yes")

ALLOWED_HOSTS = ["localhost", "127.0.0.1", "testserver"]

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.contenttypes",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

# ── URL & WSGI ────────────────────────────────────────────────
ROOT_URLCONF = "bloodledger.config.urls"

# ── Database ──────────────────────────────────────────────────
DATABASES = {}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = False
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Ledger ────────────────────────────────────────────────────
# Read by bloodledger.adapters.django_api.wiring via LedgerConfig.from_mapping.
BLOODLEDGER = {
    "authority_id": os.environ.get("BLOODLEDGER_AUTHORITY", "authority"),
    "enforce_single_pending": os.environ.get(
        "BLOODLEDGER_ENFORCE_SINGLE_PENDING", "false",
    ),
    "enforce_inventory_floor": os.environ.get(
        "BLOODLEDGER_ENFORCE_INVENTORY_FLOOR", "false",
    ),
}

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "plain",
        },
    },
    "loggers": {
        "bloodledger": {
            "handlers": ["console"],
            "level": os.environ.get("BLOODLEDGER_LOG_LEVEL", "INFO"),
            "propagate": True,
        },
    },
}
