"""Settings module with unified configuration precedence: CLI > ENV > CONFIG FILE."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import tomllib

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from .constants import (
    CIRRUS_SEARCH_PATH,
    DEFAULT_ASSET_TABLE,
    DEFAULT_OPENID_DISCOVERY_URL,
    DEFAULT_ORACLE_TABLE,
    DEFAULT_REQUEST_TIMEOUT,
    NATIVE_TOKEN_SYMBOL,
    TOKEN_LIFETIME_RESERVE_SECONDS,
)

load_dotenv()

SECRET_FIELDS = {"client_secret", "password"}
CONFIG_ENV_VAR = "STRATO_PORTFOLIO_CONFIG"
CONFIG_TABLE = "strato_portfolio"


class TomlConfigSource(PydanticBaseSettingsSource):
    """Lowest-precedence source reading a TOML file.

    The file may hold settings at top level or under a ``[strato_portfolio]``
    table. Secrets are rejected.
    """

    def __init__(self, settings_cls: type[BaseSettings], path: Path | None):
        super().__init__(settings_cls)
        self._path = path

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return None, "", False

    def _resolve_path(self) -> Path | None:
        if self._path:
            return self._path if self._path.exists() else None
        local_config = Path("strato-portfolio.toml")
        user_config = Path.home() / ".config" / "strato-portfolio" / "config.toml"
        if local_config.exists():
            return local_config
        if user_config.exists():
            return user_config
        return None

    def __call__(self) -> dict[str, Any]:
        path = self._resolve_path()
        if path is None:
            return {}

        with path.open("rb") as f:
            data = tomllib.load(f)
        body = data.get(CONFIG_TABLE, data)
        if not isinstance(body, dict):
            return {}

        for key in SECRET_FIELDS:
            if key in body:
                raise ValueError(
                    f"Security violation: '{key}' found in TOML config file. "
                    f"Secrets must only be provided via environment variables or CLI flags."
                )

        return body


class PortfolioSettings(BaseSettings):
    """Single source of truth for configuration. Values may come from:
    - CLI (init kwargs)
    - ENV / .env (prefixed with STRATO_PORTFOLIO_)
    - Config file (TOML), lowest precedence

    Do not read os.environ or files elsewhere in the codebase.
    """

    # --- node / owner ---
    marketplace_url: str | None = None
    owner_common_name: str | None = None

    # --- oauth ---
    openid_discovery_url: str = DEFAULT_OPENID_DISCOVERY_URL
    client_id: str | None = None
    client_secret: SecretStr | None = None
    username: str | None = None
    password: SecretStr | None = None
    token_lifetime_reserve_seconds: int = Field(
        default=TOKEN_LIFETIME_RESERVE_SECONDS,
        ge=0,
        description="Cached tokens are refreshed this many seconds before they expire.",
    )

    # --- cirrus tables ---
    asset_table: str = DEFAULT_ASSET_TABLE
    oracle_table: str = DEFAULT_ORACLE_TABLE
    oracle_enabled: bool = True
    native_token_symbol: str = NATIVE_TOKEN_SYMBOL

    # --- http ---
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0)
    max_retries: int = Field(default=3, ge=1)
    global_timeout_seconds: float | None = None

    # --- logging ---
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="STRATO_PORTFOLIO_",
        env_file=".env",
        extra="ignore",  # ignore unknown keys in env/config file
    )

    @field_validator("client_secret", "password", mode="before")
    @classmethod
    def wrap_secrets(cls, v: Any) -> SecretStr | None:
        """Wrap string secrets in SecretStr."""
        if v is None or isinstance(v, SecretStr):
            return v
        return SecretStr(v)

    @model_validator(mode="after")
    def validate_password_grant(self) -> "PortfolioSettings":
        """A username without a password (or the reverse) is a config mistake."""
        if (self.username is None) != (self.password is None):
            raise ValueError("username and password must be configured together")
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Custom config-file source with explicit precedence: CLI > ENV > FILE."""
        env_cfg = os.environ.get(CONFIG_ENV_VAR)
        cfg_path = Path(env_cfg) if env_cfg else None

        return (
            init_settings,  # CLI (highest)
            env_settings,  # ENV
            dotenv_settings,  # .env
            TomlConfigSource(settings_cls, cfg_path),  # CONFIG (lowest)
            file_secret_settings,  # optional secrets dir
        )

    def as_safe_dict(self) -> dict[str, Any]:
        """Return the config as a dict with secrets redacted."""
        data = self.model_dump()
        for key in SECRET_FIELDS:
            if getattr(self, key):
                data[key] = "***redacted***"
        return data

    @property
    def uses_password_grant(self) -> bool:
        return self.username is not None and self.password is not None

    @property
    def marketplace_url_required(self) -> str:
        """Get marketplace_url, raising ValueError if not set."""
        if not self.marketplace_url:
            raise ValueError("marketplace_url must be configured")
        return self.marketplace_url

    @property
    def owner_common_name_required(self) -> str:
        """Get owner_common_name, raising ValueError if not set."""
        if not self.owner_common_name:
            raise ValueError("owner_common_name must be configured")
        return self.owner_common_name

    @property
    def client_id_required(self) -> str:
        """Get client_id, raising ValueError if not set."""
        if not self.client_id:
            raise ValueError("client_id must be configured")
        return self.client_id

    @property
    def cirrus_url(self) -> str:
        """Base URL of the cirrus search endpoint."""
        base = self.marketplace_url_required.rstrip("/")
        if "://" not in base:
            base = f"https://{base}"
        return f"{base}{CIRRUS_SEARCH_PATH}"
