"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class BankingConfig(BaseSettings):
    """Banking services configuration"""

    # Storage configuration
    storage_type: str = "memory"  # memory, sqlite or postgresql
    database_url: str = "sqlite:///banking.db"
    database_pool_size: int = 10

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stdout

    # Client directory. Empty means clients are resolved in-process
    client_api_url: str = ""
    client_api_timeout: float = 5.0

    # Statement assembly
    statement_concurrency: int = 8

    # Seed the account type lookup table on startup
    seed_account_types: bool = True

    class Config:
        env_prefix = "BANKING_"
        env_file = ".env"
        case_sensitive = False


# Global configuration instance
config = BankingConfig()


def get_config() -> BankingConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> BankingConfig:
    """Reload configuration from environment"""
    global config
    config = BankingConfig()
    return config
