# plantao/core/config.py

import os
from pathlib import Path
from typing import Final


# ==========================
# Environment and infrastructure
# ==========================

#: SQLAlchemy URL for the relational store.
#: Tests point this at an in-memory SQLite database before importing the app.
DATABASE_URL: Final[str] = os.getenv("PLANTAO_DATABASE_URL", "sqlite:///./plantao.db")

#: Production switches JSON logging, strict CORS and Sentry on.
IS_PRODUCTION: Final[bool] = os.getenv("PRODUCTION", "false").lower() == "true"

#: Directory for rotating log files.
LOG_DIR: Final[Path] = Path(os.getenv("LOG_DIR", "logs"))

#: Comma separated list of allowed origins (production only).
CORS_ORIGINS: Final[list[str]] = [
    origin.strip() for origin in os.getenv("CORS_ORIGINS", "").split(",") if origin.strip()
]

SENTRY_DSN: Final[str] = os.getenv("SENTRY_DSN", "").strip()
SENTRY_ENVIRONMENT: Final[str] = os.getenv("SENTRY_ENVIRONMENT", "production")

APP_VERSION: Final[str] = "0.3.0"
RELEASE_VERSION: Final[str] = os.getenv("RELEASE_VERSION", f"plantao@{APP_VERSION}")


# ==========================
# Periods (day/night)
# ==========================

#: A shift starting at or after this hour is a night shift.
NIGHT_START_HOUR: Final[int] = 18

#: A shift starting before this hour is also a night shift.
NIGHT_END_HOUR: Final[int] = 6


# ==========================
# Report groups
# ==========================

#: Display name of the synthetic group for shifts without sector.
NO_SECTOR_NAME: Final[str] = "Sem setor"

#: Worker id/name used for vacant shifts when they are included in a report.
VACANT_WORKER_ID: Final[int] = 0
VACANT_WORKER_NAME: Final[str] = "Vago"

#: Fallback when an assignment carries no worker name.
UNNAMED_WORKER: Final[str] = "Sem nome"


# ==========================
# Individual overrides
# ==========================

#: Accepted year range for month-scoped overrides.
OVERRIDE_MIN_YEAR: Final[int] = 2000
OVERRIDE_MAX_YEAR: Final[int] = 2100
