from config.base import *  # noqa: F401,F403

SECRET_KEY = "test-secret"
JWT_SECRET = "test-jwt-secret"
COMPANY_TIMEZONE = "Asia/Kolkata"

DEBUG = False
TESTING = True

ENABLE_SCHEDULER = False
IP_LOOKUP_ENABLED = False
AUTO_INIT_DB = False
AUTO_SEED_DB = False
