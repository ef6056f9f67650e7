from .entry import ConfigEntry
from .loader import ConfigLoadError, load_config_file
from .settings import MonitorSettings
from .store import MonitoringConfig
from .validator import ConfigValidationError, ConfigValidationIssue, validate_entries, validate_entries_or_raise

__all__ = [
    "ConfigEntry",
    "ConfigLoadError",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "MonitorSettings",
    "MonitoringConfig",
    "load_config_file",
    "validate_entries",
    "validate_entries_or_raise",
]
