import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

# "csv" keeps everything under DATA_DIR; "mysql" uses DB_CONFIG.
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "csv")
DATA_DIR = os.getenv("DATA_DIR", "data")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "pase_lista"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

SESSION_DAYS = int(os.getenv("SESSION_DAYS", "1"))
MAX_LOGIN_ATTEMPTS = int(os.getenv("MAX_LOGIN_ATTEMPTS", "5"))
LOCKOUT_MINUTES = int(os.getenv("LOCKOUT_MINUTES", "15"))

# If enabled (mysql backend), app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: create the default admin account on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "1")))
DEFAULT_ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
DEFAULT_ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")
