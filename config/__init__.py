from config.settings import PROJECT_ROOT, Settings, load_settings

__all__ = ["Settings", "load_settings", "PROJECT_ROOT"]
