"""Settings modules, one per environment.

``APP_ENV`` picks the module (``dev``/``test``/``prod`` are accepted too);
each module reads its values from the process environment.
"""

import os

_MODULES = {
    "development": "config.development",
    "dev": "config.development",
    "testing": "config.testing",
    "test": "config.testing",
    "production": "config.production",
    "prod": "config.production",
}


def get_settings_module() -> str:
    env = os.getenv("APP_ENV", "development").strip().lower()
    return _MODULES.get(env, "config.development")
