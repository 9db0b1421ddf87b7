# Settings: loaded from .env at project root (or cwd) when the backend starts.
# Real environment variables always win over .env values.

from __future__ import annotations

import os
from pathlib import Path

_project_root = Path(__file__).resolve().parents[2]


def _load_dotenv() -> None:
    """Load .env from project root or cwd without overriding set variables."""
    for path in (_project_root / ".env", Path.cwd() / ".env"):
        if path.is_file():
            with open(path, encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if line and not line.startswith("#") and "=" in line:
                        k, _, v = line.partition("=")
                        v = v.strip().strip('"').strip("'")
                        os.environ.setdefault(k.strip(), v)
            break


def _int_env(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


_load_dotenv()

# Empty → in-memory store.
AQUASAFE_DB_PATH = (os.getenv("AQUASAFE_DB_PATH") or "").strip()

GEMINI_API_KEY = (os.getenv("GEMINI_API_KEY") or "").strip()
GEMINI_TEXT_MODEL = (os.getenv("GEMINI_TEXT_MODEL", "gemini-2.5-flash") or "gemini-2.5-flash").strip()

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()] or ["*"]

FEMA_LIMIT = _int_env("FEMA_LIMIT", 200)
MIN_TRAINING_SAMPLES = _int_env("MIN_TRAINING_SAMPLES", 10)


