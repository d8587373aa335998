from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.log import get_logger
from ..common.validators import require_min_length, require_non_empty
from ..core.constants import DEFAULT_LOCKOUT_MINUTES, DEFAULT_MAX_LOGIN_ATTEMPTS, MIN_PASSWORD_LENGTH
from ..core.exceptions import AccountLockedError, AuthenticationError, ValidationError
from .model import Admin, normalize_username
from .repository import AdminRepository

log = get_logger(__name__)

_USERNAME_RE = re.compile(r"^[a-z0-9._-]{3,}$")


@dataclass(frozen=True)
class SessionAdmin:
    """What we store into the Flask session after login."""

    username: str
    last_login: Optional[datetime]


@dataclass(frozen=True)
class PasswordStrength:
    score: int
    is_strong: bool
    issues: list[str]


def password_strength(password: str) -> PasswordStrength:
    issues = []
    pw = password or ""
    if len(pw) < MIN_PASSWORD_LENGTH:
        issues.append(f"Debe tener al menos {MIN_PASSWORD_LENGTH} caracteres")
    if not re.search(r"[A-Z]", pw):
        issues.append("Debe incluir una letra mayúscula")
    if not re.search(r"[a-z]", pw):
        issues.append("Debe incluir una letra minúscula")
    if not re.search(r"\d", pw):
        issues.append("Debe incluir un número")
    score = 4 - len(issues)
    if re.search(r"[^A-Za-z0-9]", pw):
        score += 1
    return PasswordStrength(score=score, is_strong=not issues, issues=issues)


class AuthService:
    """Use case: authenticate administrators (login, lockout, password change)."""

    def __init__(
        self,
        admins: AdminRepository,
        *,
        max_attempts: int = DEFAULT_MAX_LOGIN_ATTEMPTS,
        lockout_minutes: int = DEFAULT_LOCKOUT_MINUTES,
    ):
        self._admins = admins
        self._max_attempts = int(max_attempts)
        self._lockout = timedelta(minutes=int(lockout_minutes))

    def _verify(self, admin: Admin, password: str) -> bool:
        try:
            return check_password_hash(admin.password_hash, password or "")
        except Exception:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            return False

    def authenticate(self, username: str, password: str, *, now: Optional[datetime] = None) -> SessionAdmin:
        now = now or datetime.now()
        if not username or not password:
            raise AuthenticationError("Usuario y contraseña son requeridos", code="MISSING_CREDENTIALS")

        admin = self._admins.get_by_username(username)
        if not admin:
            raise AuthenticationError("Credenciales inválidas")

        if admin.is_locked(now):
            minutes = int(admin.lock_time_remaining(now).total_seconds() // 60) + 1
            raise AccountLockedError(f"Cuenta temporalmente bloqueada. Intente en {minutes} minutos")

        if not self._verify(admin, password):
            attempts = admin.login_attempts + 1
            lock_until = now + self._lockout if attempts >= self._max_attempts else None
            self._admins.save(replace(admin, login_attempts=attempts, lock_until=lock_until))
            log.warning("Intento de login fallido para %s (%d)", admin.username, attempts)
            if lock_until:
                raise AccountLockedError("Cuenta temporalmente bloqueada por intentos fallidos")
            raise AuthenticationError("Credenciales inválidas")

        self._admins.save(replace(admin, login_attempts=0, lock_until=None, last_login=now))
        log.info("Login de administrador: %s", admin.username)
        return SessionAdmin(username=admin.username, last_login=now)

    def login_attempts(self, username: str) -> dict:
        admin = self._admins.get_by_username(username)
        if not admin:
            raise ValidationError("Administrador no encontrado")
        now = datetime.now()
        return {
            "username": admin.username,
            "login_attempts": admin.login_attempts,
            "max_attempts": self._max_attempts,
            "locked": admin.is_locked(now),
            "lock_until": admin.lock_until.isoformat() if admin.lock_until else None,
        }

    def change_password(self, username: str, current_password: str, new_password: str) -> None:
        admin = self._admins.get_by_username(username)
        if not admin:
            raise AuthenticationError("Credenciales inválidas")
        if not self._verify(admin, current_password):
            raise AuthenticationError("La contraseña actual es incorrecta", code="INVALID_PASSWORD")
        if current_password == new_password:
            raise ValidationError("La nueva contraseña debe ser diferente a la actual")

        strength = password_strength(new_password)
        if not strength.is_strong:
            raise ValidationError("; ".join(strength.issues), code="WEAK_PASSWORD")

        self._admins.save(replace(admin, password_hash=generate_password_hash(new_password)))
        log.info("Contraseña actualizada para %s", admin.username)

    def ensure_default_admin(self, username: str, password: str) -> bool:
        """Create the first admin account if it is missing. Returns True when created."""
        username = normalize_username(require_non_empty(username, "Nombre de usuario"))
        require_min_length(password, "Contraseña", 6)
        if not _USERNAME_RE.match(username):
            raise ValidationError("Formato de nombre de usuario inválido")

        if self._admins.get_by_username(username):
            return False
        self._admins.save(Admin(username=username, password_hash=generate_password_hash(password)))
        log.info("Administrador por defecto creado: %s", username)
        return True
