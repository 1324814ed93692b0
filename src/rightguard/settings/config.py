"""Configuration loader for Right Guard services using Pydantic settings.

Values resolve in this order (first wins): explicit keyword arguments,
``RIGHTGUARD_*`` environment variables (``__`` separates nested sections),
``.env`` files, the TOML file named by ``RIGHTGUARD_SETTINGS_FILE``,
``config/settings.local.toml``, ``config/settings.default.toml``, and finally
the field defaults below. Most fields also accept a short unprefixed
variable (``OPENAI_API_KEY``, ``PINATA_JWT``, ``BASE_RPC_URL`` ...).
"""

from __future__ import annotations

import os
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

ENV_VAR_NAME = "RIGHTGUARD_ENV"
SETTINGS_FILE_ENV_VAR = "RIGHTGUARD_SETTINGS_FILE"
DEFAULT_ENV = "local"
PROJECT_ROOT = Path(__file__).resolve().parents[3]
CONFIG_DIR = PROJECT_ROOT / "config"
DEFAULT_CONFIG_FILE = CONFIG_DIR / "settings.default.toml"
LOCAL_CONFIG_FILE = CONFIG_DIR / "settings.local.toml"
DATA_DIR = PROJECT_ROOT / "data"


def _aliases(section: str, field: str, *short: str) -> AliasChoices:
    """Accept the short variable names plus ``SECTION__FIELD``."""

    return AliasChoices(*short, f"{section}__{field}".upper())


def _active_env(explicit: str | None = None) -> str:
    return (explicit or os.getenv(ENV_VAR_NAME) or DEFAULT_ENV).strip()


def _dotenv_files(env: str) -> list[Path]:
    names = (".env", f".env.{env}", ".env.local")
    return [PROJECT_ROOT / name for name in names if (PROJECT_ROOT / name).exists()]


def _toml_files() -> tuple[Path, ...]:
    """TOML config files that exist, highest precedence first."""

    candidates: list[Path] = []
    override = os.getenv(SETTINGS_FILE_ENV_VAR)
    if override:
        path = Path(override).expanduser()
        candidates.append(path if path.is_absolute() else (PROJECT_ROOT / path).resolve())
    candidates.extend([LOCAL_CONFIG_FILE, DEFAULT_CONFIG_FILE])
    return tuple(path for path in candidates if path.exists())


class TomlFileSource(PydanticBaseSettingsSource):
    """Settings source reading one TOML document whose tables match the sections."""

    def __init__(self, settings_cls: type[BaseSettings], path: Path) -> None:
        super().__init__(settings_cls)
        self.path = path
        try:
            with path.open("rb") as handle:
                self._data: dict[str, Any] = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise ValueError(f"Invalid TOML in {path}: {exc}") from exc

    def get_field_value(self, field, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        return dict(self._data)


def _first_env(*names: str) -> str | None:
    for name in names:
        value = os.getenv(name)
        if value:
            return value.strip()
    return None


class _Section(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)


class RuntimeSettings(_Section):
    log_level: str = Field(default="INFO", validation_alias=_aliases("runtime", "log_level", "LOG_LEVEL"))


class APISettings(_Section):
    """Where the API is served and how the client gateway reaches it."""

    base_url: str = Field(default="http://127.0.0.1:8000", validation_alias=_aliases("api", "base_url", "API_URL"))
    prefix: str = Field(default="/api", validation_alias=_aliases("api", "prefix", "API_PREFIX"))
    timeout_seconds: float = Field(default=30.0, validation_alias=_aliases("api", "timeout_seconds"))


class StorageSettings(_Section):
    structured_backend: Literal["sqlite", "postgres"] = Field(
        default="sqlite", validation_alias=_aliases("storage", "structured_backend", "STRUCTURED_BACKEND")
    )
    sqlite_path: Path = Field(default=DATA_DIR / "rightguard.db", validation_alias=_aliases("storage", "sqlite_path"))
    database_url: str | None = Field(default=None, validation_alias=_aliases("storage", "database_url"))


class LLMSettings(_Section):
    """Guide generation provider. ``mock`` returns canned guides without a network call."""

    provider: Literal["openai", "ollama", "mock"] = Field(
        default="openai", validation_alias=_aliases("llm", "provider", "LLM_PROVIDER")
    )
    chat_model: str = Field(default="gpt-4", validation_alias=_aliases("llm", "chat_model", "LLM_CHAT_MODEL"))
    temperature: float = Field(default=0.3, validation_alias=_aliases("llm", "temperature"))
    max_tokens: int = Field(default=2000, validation_alias=_aliases("llm", "max_tokens"))
    openai_api_key: str | None = Field(default=None, validation_alias=_aliases("llm", "openai_api_key", "OPENAI_API_KEY"))
    openai_base_url: str | None = Field(
        default=None, validation_alias=_aliases("llm", "openai_base_url", "OPENAI_BASE_URL")
    )
    ollama_base_url: str = Field(
        default="http://127.0.0.1:11434", validation_alias=_aliases("llm", "ollama_base_url", "OLLAMA_BASE_URL")
    )


class IPFSSettings(_Section):
    """Pinata credentials and endpoints for pinning incident media."""

    pinata_jwt: str | None = Field(
        default=None, validation_alias=_aliases("ipfs", "pinata_jwt", "PINATA_JWT", "PINATA_API_KEY")
    )
    pin_endpoint: str = Field(
        default="https://api.pinata.cloud/pinning/pinFileToIPFS", validation_alias=_aliases("ipfs", "pin_endpoint")
    )
    gateway_url: str = Field(
        default="https://gateway.pinata.cloud", validation_alias=_aliases("ipfs", "gateway_url", "IPFS_GATEWAY_URL")
    )
    timeout_seconds: float = Field(default=60.0, validation_alias=_aliases("ipfs", "timeout_seconds"))


class ChainSettings(_Section):
    rpc_url: str = Field(
        default="https://mainnet.base.org",
        validation_alias=_aliases("chain", "rpc_url", "BASE_RPC_URL", "NEXT_PUBLIC_BASE_RPC_URL"),
    )
    timeout_seconds: float = Field(default=15.0, validation_alias=_aliases("chain", "timeout_seconds"))


class NotificationSettings(_Section):
    """Failure probabilities of the simulated SMS, social, and email channels."""

    sms_failure_rate: float = Field(default=0.05, ge=0.0, le=1.0, validation_alias=_aliases("notifications", "sms_failure_rate"))
    social_failure_rate: float = Field(
        default=0.10, ge=0.0, le=1.0, validation_alias=_aliases("notifications", "social_failure_rate")
    )
    email_failure_rate: float = Field(
        default=0.0, ge=0.0, le=1.0, validation_alias=_aliases("notifications", "email_failure_rate")
    )


class GeocodingSettings(_Section):
    reverse_url: str = Field(
        default="https://api.bigdatacloud.net/data/reverse-geocode-client",
        validation_alias=_aliases("geocoding", "reverse_url"),
    )
    timeout_seconds: float = Field(default=10.0, validation_alias=_aliases("geocoding", "timeout_seconds"))


class RecordingSettings(_Section):
    max_duration_seconds: float = Field(
        default=300.0, gt=0, validation_alias=_aliases("recording", "max_duration_seconds")
    )


class ClientSettings(_Section):
    storage_path: Path = Field(
        default=DATA_DIR / "client_storage.json",
        validation_alias=_aliases("client", "storage_path", "CLIENT_STORAGE_PATH"),
    )


class ObservabilitySettings(_Section):
    structured_logging: bool = Field(default=True, validation_alias=_aliases("observability", "structured_logging"))
    statsd_host: str | None = Field(default=None, validation_alias=_aliases("observability", "statsd_host", "STATSD_HOST"))
    statsd_port: int = Field(default=8125, validation_alias=_aliases("observability", "statsd_port", "STATSD_PORT"))
    statsd_prefix: str = Field(default="rightguard", validation_alias=_aliases("observability", "statsd_prefix"))
    service_name: str = Field(default="rightguard-api", validation_alias=_aliases("observability", "service_name"))


class Settings(BaseSettings):
    """Top-level configuration with one nested section per subsystem."""

    env: str = Field(default_factory=_active_env, validation_alias=AliasChoices("ENV", "RUNTIME__ENV"))
    project_root: Path = Field(default=PROJECT_ROOT)
    runtime: RuntimeSettings = Field(default_factory=RuntimeSettings)
    api: APISettings = Field(default_factory=APISettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    ipfs: IPFSSettings = Field(default_factory=IPFSSettings)
    chain: ChainSettings = Field(default_factory=ChainSettings)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    geocoding: GeocodingSettings = Field(default_factory=GeocodingSettings)
    recording: RecordingSettings = Field(default_factory=RecordingSettings)
    client: ClientSettings = Field(default_factory=ClientSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)
    env_files: tuple[Path, ...] = Field(default_factory=tuple, exclude=True)
    config_files: tuple[Path, ...] = Field(default_factory=tuple, exclude=True)

    model_config = SettingsConfigDict(
        env_prefix="RIGHTGUARD_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        toml_sources = tuple(TomlFileSource(settings_cls, path) for path in _toml_files())
        return (init_settings, env_settings, dotenv_settings, *toml_sources, file_secret_settings)

    @model_validator(mode="after")
    def _finalize(self) -> "Settings":
        """Anchor relative paths at the project root, then apply per-environment rules."""

        def _anchor(path: Path) -> Path:
            return path if path.is_absolute() else (self.project_root / path).resolve()

        self._replace("storage", sqlite_path=_anchor(self.storage.sqlite_path))
        self._replace("client", storage_path=_anchor(self.client.storage_path))

        if self.is_local:
            # Local runs never need credentials or a metrics agent.
            self._replace("storage", structured_backend="sqlite", database_url=None)
            if self.llm.provider == "openai" and not self.llm.openai_api_key:
                self._replace("llm", provider="mock")
            self._replace("observability", structured_logging=False, statsd_host=None)

        provider = _first_env("RIGHTGUARD_LLM__PROVIDER", "RIGHTGUARD_LLM_PROVIDER", "LLM__PROVIDER", "LLM_PROVIDER")
        if provider:
            self._replace("llm", provider=provider.lower())

        database_url = _first_env("RIGHTGUARD_DATABASE_URL", "DATABASE_URL")
        if database_url and not self.storage.database_url:
            self._replace("storage", database_url=database_url)
        return self

    def _replace(self, section: str, **updates: Any) -> None:
        object.__setattr__(self, section, getattr(self, section).model_copy(update=updates))

    @property
    def log_level(self) -> str:
        return self.runtime.log_level

    @property
    def api_base_url(self) -> str:
        return self.api.base_url

    @property
    def sqlite_path(self) -> Path:
        return self.storage.sqlite_path

    @property
    def is_local(self) -> bool:
        return self.env.lower() == "local"


def _load_settings(env: str | None = None) -> Settings:
    resolved_env = _active_env(env)
    dotenv_files = _dotenv_files(resolved_env)
    return Settings(
        _env_file=[str(path) for path in dotenv_files] or None,
        _env_file_encoding="utf-8",
        env=resolved_env,
        env_files=tuple(dotenv_files),
        config_files=_toml_files(),
    )


@lru_cache(maxsize=1)
def get_settings(env: str | None = None) -> Settings:
    """Return cached settings for the requested environment."""

    return _load_settings(env)


def reload_settings(env: str | None = None) -> Settings:
    """Clear the cached settings and reload from disk."""

    get_settings.cache_clear()
    return get_settings(env)


__all__ = [
    "ENV_VAR_NAME",
    "PROJECT_ROOT",
    "Settings",
    "get_settings",
    "reload_settings",
]
