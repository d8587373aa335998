import os

SECRET_KEY = "test-secret"

STORAGE_BACKEND = "csv"
DATA_DIR = os.getenv("DATA_DIR", "data-test")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "pase_lista_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

SESSION_DAYS = 1
MAX_LOGIN_ATTEMPTS = 3
LOCKOUT_MINUTES = 15

AUTO_INIT_DB = False
AUTO_SEED_DB = True
DEFAULT_ADMIN_USERNAME = "admin"
DEFAULT_ADMIN_PASSWORD = "Admin123"
