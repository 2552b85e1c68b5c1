# robust .env loading
import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

# 1) load from CWD (project root when you run commands there)
load_dotenv(override=False)
# 2) also try repo root even if code runs from src/
_env_path = Path(__file__).resolve().parents[2] / ".env"
if _env_path.exists():
    load_dotenv(dotenv_path=_env_path, override=True)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


# --- Flask / server ---
SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
FLASK_ENV = os.getenv("FLASK_ENV", "production")
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
API_PREFIX = os.getenv("API_PREFIX", "/api")

# --- MongoDB ---
MONGODB_URI = os.getenv("MONGODB_URI")
MONGO_DB = os.getenv("MONGO_DB", "agegate")

# --- Sessions ---
SESSION_BACKEND = os.getenv("SESSION_BACKEND") or ("mongo" if MONGODB_URI else "memory")
SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", str(14 * 24 * 3600)))

# --- Gate ---
AVS_ENABLED = _env_bool("AVS_ENABLED", True)
AVS_METHOD = os.getenv("AVS_METHOD", "question")
AVS_MIN_AGE = os.getenv("AVS_MIN_AGE", "18")
AVS_DATE_FORMAT = os.getenv("AVS_DATE_FORMAT", "mdy")
# "session" is the documented default; the policy itself treats unknown values as "always"
AVS_FREQUENCY = os.getenv("AVS_FREQUENCY", "session")
AVS_PATH_MODE = os.getenv("AVS_PATH_MODE", "exclude")
AVS_PATH_PATTERNS = os.getenv("AVS_PATH_PATTERNS", "")
AVS_REDIRECT_SUCCESS = os.getenv("AVS_REDIRECT_SUCCESS", "")
AVS_REDIRECT_FAILURE = os.getenv("AVS_REDIRECT_FAILURE", "")

METHODS = ("question", "dob")
DATE_FORMATS = ("mdy", "dmy")
FREQUENCIES = ("never", "session", "daily", "weekly", "always")
PATH_MODES = ("include", "exclude")

DEFAULT_MIN_AGE = 18


@dataclass(frozen=True)
class GateSettings:
    """Read-only snapshot of the gate configuration handed to the core."""

    enabled: bool = True
    method: str = "question"
    min_age: int = DEFAULT_MIN_AGE
    date_format: str = "mdy"
    frequency: str = "session"
    path_mode: str = "exclude"
    path_patterns: List[str] = field(default_factory=list)
    redirect_success: Optional[str] = None
    redirect_failure: Optional[str] = None

    def to_dict(self) -> Dict:
        return asdict(self)


def _min_age(value) -> int:
    try:
        age = int(str(value).strip())
    except (TypeError, ValueError):
        return DEFAULT_MIN_AGE
    return max(0, age)


def _patterns(value) -> List[str]:
    if isinstance(value, (list, tuple)):
        items = value
    else:
        items = str(value or "").replace(",", "\n").splitlines()
    return [p.strip() for p in items if p and p.strip()]


def gate_settings() -> GateSettings:
    """
    Build the settings snapshot from the module values at call time.
    Unknown method falls back to "question", unknown date format to "mdy".
    """
    method = str(AVS_METHOD or "").strip().lower()
    date_format = str(AVS_DATE_FORMAT or "").strip().lower()
    path_mode = str(AVS_PATH_MODE or "").strip().lower()
    frequency = str(AVS_FREQUENCY or "").strip().lower()

    return GateSettings(
        enabled=bool(AVS_ENABLED),
        method=method if method in METHODS else "question",
        min_age=_min_age(AVS_MIN_AGE),
        date_format=date_format if date_format in DATE_FORMATS else "mdy",
        frequency=frequency or "always",
        path_mode=path_mode if path_mode in PATH_MODES else "exclude",
        path_patterns=_patterns(AVS_PATH_PATTERNS),
        redirect_success=(AVS_REDIRECT_SUCCESS or "").strip() or None,
        redirect_failure=(AVS_REDIRECT_FAILURE or "").strip() or None,
    )
