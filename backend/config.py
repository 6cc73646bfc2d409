import os
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./askpulse.db")
# Managed Postgres providers need TLS but ship self-signed chains
DATABASE_SSL = os.getenv("DATABASE_SSL", "false").lower() in ("1", "true", "yes")

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]
FRONTEND_URL = os.getenv("FRONTEND_URL", "")

SESSION_DURATION_HOURS = int(os.getenv("SESSION_DURATION_HOURS", "24"))
RATE_LIMIT_PURGE_SECONDS = int(os.getenv("RATE_LIMIT_PURGE_SECONDS", "300"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
