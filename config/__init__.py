import os

_ENV_MODULES = {
    "prod": "config.production",
    "production": "config.production",
    "test": "config.testing",
    "testing": "config.testing",
}


def get_settings_module() -> str:
    """Dotted path of the settings module for this process.

    ``HRM_SETTINGS_MODULE`` wins outright; otherwise ``APP_ENV`` picks one of
    the bundled modules and anything unknown means development.
    """

    explicit = os.getenv("HRM_SETTINGS_MODULE", "").strip()
    if explicit:
        return explicit
    env = os.getenv("APP_ENV", "development").strip().lower()
    return _ENV_MODULES.get(env, "config.development")
