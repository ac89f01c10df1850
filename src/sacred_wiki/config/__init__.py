"""Configuration module for sacred-wiki."""

from sacred_wiki.config.settings import Settings

# Process-wide settings, loaded from the environment on first use
_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the shared Settings instance, loading it on first access."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Replace the shared Settings instance.

    Args:
        settings: Settings to use for subsequent get_settings() calls
    """
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Forget the shared Settings so the next access re-reads the environment."""
    global _settings
    _settings = None


__all__ = ["Settings", "get_settings", "set_settings", "reset_settings"]
