"""설정 모듈"""

from .settings import Settings, load_settings, save_settings, DEFAULT_SETTINGS_PATH

__all__ = ["Settings", "load_settings", "save_settings", "DEFAULT_SETTINGS_PATH"]
