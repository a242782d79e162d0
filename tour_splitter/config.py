"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings
from typing import Literal, Optional


class SplitterConfig(BaseSettings):
    """Tour splitter ledger configuration"""

    # Ledger constants
    default_split_rule: int = 1  # Reserved, not read by any operation
    burn_principal: str = "SP000000000000000000002Q6VF78"

    # Split calculation
    default_role_weight: int = 100
    max_role_weight: int = 1000
    organizer_role: str = "organizer"
    validation_role: str = "participant"
    zero_pool_policy: Literal["zero", "reject"] = "zero"

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stdout

    # Feature flags
    enable_audit_logging: bool = True
    enable_events: bool = True

    class Config:
        env_prefix = "SPLITTER_"
        env_file = ".env"
        case_sensitive = False


# Global configuration instance
config = SplitterConfig()


def get_config() -> SplitterConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> SplitterConfig:
    """Reload configuration from environment"""
    global config
    config = SplitterConfig()
    return config
