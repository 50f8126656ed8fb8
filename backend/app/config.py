import os

from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"

CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
]
_extra = os.getenv("CORS_ORIGINS", "")
if _extra:
    CORS_ORIGINS.extend(o.strip() for o in _extra.split(",") if o.strip())

# Seeds for the default round of a freshly created plan
DEFAULT_GROUP_SIZE = max(2, _int_env("DEFAULT_GROUP_SIZE", 4))
DEFAULT_ADVANCING_PLAYERS = max(1, min(DEFAULT_GROUP_SIZE - 1, _int_env("DEFAULT_ADVANCING_PLAYERS", 2)))
DEFAULT_GROUP_PHASE_SIZE = max(2, _int_env("DEFAULT_GROUP_PHASE_SIZE", 4))
