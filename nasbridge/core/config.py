"""Configuration management using Pydantic Settings."""

import logging
import tomllib
from pathlib import Path
from typing import Literal

import tomli_w
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class NasConfig(BaseSettings):
    """Connection and policy settings for the NAS sync target.

    Attributes:
        host: Hostname or IP address of the NAS
        port: Optional port; 445 selects SMB when protocol is "auto"
        remote_path: Root path on the NAS. For WebDAV this is the URL path,
                     for SMB the first segment is the share name
                     (e.g. "photos/vacation" -> share "photos", subpath "vacation")
        protocol: "auto" (port based), "webdav" or "smb"
    """

    model_config = SettingsConfigDict(env_prefix="NASBRIDGE_NAS_", case_sensitive=False)

    host: str | None = None
    port: int | None = None
    username: str | None = None
    password: str | None = None
    use_https: bool = False
    remote_path: str | None = None
    sync_favorites_only: bool = False
    protocol: Literal["auto", "webdav", "smb"] = "auto"
    ssl_verify: bool = True
    timeout: float = 300.0

    @field_validator("host", mode="before")
    @classmethod
    def strip_host(cls, v: str | None) -> str | None:
        """Drop surrounding whitespace and treat blank hosts as unset."""
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("port", mode="before")
    @classmethod
    def validate_port(cls, v: int | str | None) -> int | None:
        """Validate the TCP port range."""
        if v is None or v == "":
            return None
        port = int(v)
        if not 1 <= port <= 65535:
            raise ValueError("NAS port must be between 1 and 65535")
        return port

    @field_validator("protocol", mode="before")
    @classmethod
    def normalize_protocol(cls, v: str) -> str:
        return str(v).lower()

    @property
    def is_configured(self) -> bool:
        """True when host and username are set (password may live in the keyring)."""
        return bool(self.host and self.username)

    def get_password(self) -> str | None:
        """
        Get the NAS password from keyring or config.

        Priority:
        1. System keyring (if host and username are configured)
        2. Config/environment variable (fallback)

        Returns:
            Password if found, None otherwise
        """
        if self.host and self.username:
            try:
                from nasbridge.utils.credentials import CredentialStore

                cred_store = CredentialStore()
                password = cred_store.get_nas_password(self.host, self.username)
                if password:
                    logger.debug("Using NAS password from system keyring")
                    return password
            except Exception as e:
                logger.warning(f"Failed to retrieve password from keyring: {e}")

        if self.password:
            logger.debug("Using NAS password from config/environment")
            return self.password

        return None

    def with_credentials(self) -> "NasConfig":
        """Return a copy of this config with the password resolved."""
        return self.model_copy(update={"password": self.get_password()})


class GeneralConfig(BaseSettings):
    """General application configuration."""

    model_config = SettingsConfigDict(env_prefix="NASBRIDGE_GENERAL_", case_sensitive=False)

    log_level: str = "INFO"
    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".nasbridge"
    )
    log_file_name: str = "nasbridge.log"
    log_file_max_bytes: int = 5 * 1024 * 1024
    log_file_backup_count: int = 3
    # Category -> level, e.g. {"smb": "WARNING"}
    log_overrides: dict[str, str] = Field(default_factory=dict)
    # Runtime metadata - not serialized to config file (stored in settings DB instead)
    config_file: Path | None = Field(default=None, exclude=True)

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"Log level must be one of: {', '.join(valid_levels)}")
        return v

    @field_validator("data_dir", mode="before")
    @classmethod
    def expand_data_dir(cls, v: str | Path) -> Path:
        """Expand user home directory in data directory path."""
        return Path(v).expanduser().resolve()


class AppConfig(BaseSettings):
    """Top-level configuration: ``[general]`` and ``[nas]`` TOML sections.

    Environment variables use the ``NASBRIDGE_`` prefix with ``__`` between
    section and field, e.g. ``NASBRIDGE_NAS__HOST``.
    """

    model_config = SettingsConfigDict(
        env_prefix="NASBRIDGE_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    general: GeneralConfig = Field(default_factory=GeneralConfig)
    nas: NasConfig = Field(default_factory=NasConfig)

    @classmethod
    def load_from_file(cls, config_path: Path) -> "AppConfig":
        """Read a TOML file; a missing file yields the defaults."""
        try:
            with open(config_path, "rb") as f:
                sections = tomllib.load(f)
        except FileNotFoundError:
            logger.warning(f"Config file not found: {config_path}, using defaults")
            return cls()

        return cls(**sections)

    def save_to_file(self, config_path: Path) -> None:
        """Write the config as TOML.

        The NAS password is never written; store it with
        ``nasbridge nas set-password`` instead.
        """
        sections = self.model_dump(mode="json", exclude_none=True, exclude={"nas": {"password"}})

        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_bytes(tomli_w.dumps(sections).encode("utf-8"))
        logger.info(f"Configuration saved to {config_path}")

    def ensure_data_dir(self) -> None:
        self.general.data_dir.mkdir(parents=True, exist_ok=True)

    @property
    def settings_db_path(self) -> Path:
        """SQLite file holding the last-sync time."""
        return self.general.data_dir / "settings.db"

    @property
    def download_dir(self) -> Path:
        """Where files downloaded from the NAS are written."""
        return self.general.data_dir / "downloaded"

    @property
    def default_config_path(self) -> Path:
        return self.general.data_dir / "config.toml"


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load ``config_path``, or ``<data_dir>/config.toml`` when not given.

    The resolved path is recorded in ``general.config_file`` even when the
    file does not exist yet, so ``config --init`` knows where to write.
    """
    if config_path is None:
        config_path = AppConfig().default_config_path

    config = AppConfig.load_from_file(config_path)
    config.general.config_file = config_path
    config.ensure_data_dir()
    return config
