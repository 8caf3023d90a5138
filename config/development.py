import os

from config.base import *  # noqa: F401,F403
from config.base import _bool

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
JWT_SECRET = os.getenv("JWT_SECRET") or SECRET_KEY

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG").upper()

# If enabled, app will apply schema.sql and pending migrations on startup
AUTO_INIT_DB = _bool("AUTO_INIT_DB", "1")
# Optional: also seed demo data on startup
AUTO_SEED_DB = _bool("AUTO_SEED_DB", "0")
