"""
Configuration module
"""

from myinvois.config.myinvois_config import (
    MyInvoisConfig,
    MyInvoisEnvironment,
    MYINVOIS_BASE_URLS,
    MYINVOIS_IDENTITY_URLS,
    MYINVOIS_PORTAL_URLS,
    ENV_VAR_MAPPING,
    ConfigDefaults,
)
from myinvois.config.config_loader import ConfigLoader
from myinvois.config.config_validator import (
    ConfigValidator,
    ValidationResult,
    ValidationErrorDetail,
)

__all__ = [
    "MyInvoisConfig",
    "MyInvoisEnvironment",
    "MYINVOIS_BASE_URLS",
    "MYINVOIS_IDENTITY_URLS",
    "MYINVOIS_PORTAL_URLS",
    "ENV_VAR_MAPPING",
    "ConfigDefaults",
    "ConfigLoader",
    "ConfigValidator",
    "ValidationResult",
    "ValidationErrorDetail",
]
