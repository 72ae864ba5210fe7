from .settings_file import YamlSettingsStore

__all__ = ["YamlSettingsStore"]
