"""Configuration subsystem for ACMEPA.

Public API::

    from acmepa.config import get_config, PAConfig

    # At startup (CLI only):
    PAConfig(config_file="config.yaml")

    # Everywhere else:
    cfg = get_config()
    limit = cfg.settings.policy.max_dns_identifier_length
"""

from acmepa.config.pa_config import (
    ConfigValidationError,
    PAConfig,
    get_config,
)
from acmepa.config.settings import (
    AuditLogSettings,
    ChallengeSettings,
    LoggingSettings,
    PASettings,
    PolicySettings,
    PublicSuffixSettings,
)

__all__ = [
    "AuditLogSettings",
    "ChallengeSettings",
    "ConfigValidationError",
    "LoggingSettings",
    "PAConfig",
    "PASettings",
    "PolicySettings",
    "PublicSuffixSettings",
    "get_config",
]
