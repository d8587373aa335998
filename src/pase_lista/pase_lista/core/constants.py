"""Defaults and CSV layout shared by both storage backends.

Header order is the on-disk layout of existing data directories; keep it stable.
"""

DEFAULT_SESSION_DAYS = 1
DEFAULT_MAX_LOGIN_ATTEMPTS = 5
DEFAULT_LOCKOUT_MINUTES = 15
DEFAULT_HISTORY_LIMIT = 100
MAX_REPORT_DAYS = 366
MIN_PASSWORD_LENGTH = 8

STUDENT_HEADERS = ["matricula", "nombre", "grupo"]
ATTENDANCE_HEADERS = ["matricula", "nombre", "grupo", "timestamp", "status"]
DEVICE_HEADERS = ["device_fingerprint", "matricula", "first_registration", "last_used", "user_agent"]
ADMIN_HEADERS = ["username", "password", "last_login", "login_attempts", "lock_until"]

STUDENTS_FILE = "students.csv"
ATTENDANCE_FILE = "attendance.csv"
DEVICES_FILE = "devices.csv"
ADMINS_FILE = "admin.csv"
