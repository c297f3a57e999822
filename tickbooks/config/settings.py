"""
Configuration management for Tickbooks.

Only the command line reads configuration. The core operations take
credentials explicitly, so a web or job runner can supply its own.
"""

from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tickbooks.models.credentials import Credentials, CredentialSet

TICK_DOMAIN = "tickspot.com"


def normalize_tick_url(value: str) -> str:
    """
    Turn a Tick subdomain or URL into an ``https://`` account URL.

    Example:
        >>> normalize_tick_url("acme")
        'https://acme.tickspot.com'
        >>> normalize_tick_url("http://acme.tickspot.com/")
        'https://acme.tickspot.com'
    """
    url = value.strip().rstrip("/")
    if url.startswith("http://"):
        url = url[len("http://"):]
    elif url.startswith("https://"):
        url = url[len("https://"):]

    if not url:
        raise ValueError("Tick URL cannot be empty")

    if "." not in url:
        url = f"{url}.{TICK_DOMAIN}"

    return f"https://{url}"


class TickbooksConfig(BaseSettings):
    """Configuration settings for Tickbooks."""

    # Tick (time tracking)
    tick_url: str = Field(alias="TICK_URL")
    tick_email: str = Field(alias="TICK_EMAIL")
    tick_password: str = Field(alias="TICK_PASSWORD")
    tick_timeout: float = Field(default=15.0, gt=0, alias="TICK_TIMEOUT")

    # FreshBooks (invoicing)
    freshbooks_url: str = Field(alias="FRESHBOOKS_URL")
    freshbooks_token: str = Field(alias="FRESHBOOKS_TOKEN")
    freshbooks_timeout: float = Field(default=10.0, gt=0, alias="FRESHBOOKS_TIMEOUT")

    # Treat malformed XML responses as empty documents
    lenient_xml_parsing: bool = Field(default=True, alias="LENIENT_XML_PARSING")

    # Local join records between Tick entries and FreshBooks invoices
    join_store_path: str = Field(
        default=".tickbooks/join_records.json", alias="JOIN_STORE_PATH"
    )

    # Application Configuration
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="WARNING", alias="LOG_LEVEL")

    # Retries for idempotent requests
    max_retries: int = Field(default=2, ge=0, alias="MAX_RETRIES")
    retry_delay: float = Field(default=1.0, ge=0, alias="RETRY_DELAY")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    @field_validator("tick_url")
    @classmethod
    def validate_tick_url(cls, v):
        """Accept a bare subdomain and always talk https."""
        return normalize_tick_url(v)

    @field_validator("freshbooks_url")
    @classmethod
    def validate_freshbooks_url(cls, v):
        """The FreshBooks API URL differs from the account URL; require a full URL."""
        v = v.strip()
        if not v.startswith(("https://", "http://")):
            raise ValueError("FreshBooks API URL must start with https://")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        valid_envs = ["development", "testing", "production"]
        if v.lower() not in valid_envs:
            raise ValueError(f"Environment must be one of: {valid_envs}")
        return v.lower()

    def get_credentials(self) -> CredentialSet:
        """Build the credential pair handed to the core operations."""
        return CredentialSet(
            time_tracking=Credentials(
                base_url=self.tick_url,
                identity=self.tick_email,
                secret=self.tick_password,
            ),
            invoicing=Credentials(
                base_url=self.freshbooks_url,
                identity=self.freshbooks_token,
                secret="",
            ),
        )

    @property
    def join_store_file(self) -> Path:
        return Path(self.join_store_path).expanduser()


def load_config(env_file: Optional[str] = None) -> TickbooksConfig:
    """Load configuration from environment variables and .env file."""
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    return TickbooksConfig()


# Global configuration instance
_config: Optional[TickbooksConfig] = None


def get_config() -> TickbooksConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(env_file: Optional[str] = None) -> TickbooksConfig:
    """Reload configuration (useful for testing)."""
    global _config
    _config = load_config(env_file)
    return _config
