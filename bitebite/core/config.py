import logging
import os

from dotenv import load_dotenv

# Load .env from the project root
load_dotenv()

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./bitebite.db")
ENV = os.getenv("ENV", "dev")
ENV_NORMALIZED = ENV.lower()
IS_DEV = ENV_NORMALIZED in {"dev", "development", "local"}
IS_TEST = ENV_NORMALIZED == "test"
IS_PROD = ENV_NORMALIZED in {"prod", "production"}
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

ADMIN_API_TOKEN = os.getenv("ADMIN_API_TOKEN", "").strip()

SEED_MENU = os.getenv("SEED_MENU", "1" if IS_DEV else "0").strip().lower() in {
    "1",
    "true",
    "yes",
    "on",
}

PRICE_POLICIES = {"trust", "reprice", "reject"}
STATUS_POLICIES = {"permissive", "forward_only"}


def _read_policy(name: str, allowed: set[str], default: str) -> str:
    value = os.getenv(name, default).strip().lower()
    if value not in allowed:
        logger.warning("Invalid %s=%s; falling back to %s", name, value, default)
        return default
    return value


ORDER_PRICE_POLICY = _read_policy("ORDER_PRICE_POLICY", PRICE_POLICIES, "trust")
ORDER_STATUS_POLICY = _read_policy("ORDER_STATUS_POLICY", STATUS_POLICIES, "permissive")

# CORS
_cors_env = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS = [origin.strip() for origin in _cors_env.split(",") if origin.strip() and origin.strip() != "*"]

if not CORS_ORIGINS and (IS_DEV or IS_TEST):
    CORS_ORIGINS = [
        "http://localhost:5173",
        "http://localhost:8080",
        "http://localhost:8081",
        "http://localhost:8082",
    ]

_frontend_url = os.getenv("FRONTEND_URL", "").strip()
if _frontend_url and _frontend_url not in CORS_ORIGINS:
    CORS_ORIGINS.append(_frontend_url)
