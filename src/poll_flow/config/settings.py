"""Configuration settings using Pydantic."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local storage backend configuration."""
    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    backend: str = "memory"  # memory, local
    data_path: str = "./data"


class SupabaseSettings(BaseSettings):
    """Supabase configuration."""
    model_config = SettingsConfigDict(env_prefix="SUPABASE_")

    url: str = ""
    key: str = ""
    surveys_table: str = "surveys"
    responses_table: str = "survey_responses"

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.key)


class RemoteSettings(BaseSettings):
    """Remote submission targets."""
    model_config = SettingsConfigDict(env_prefix="REMOTE_")

    console_debug: bool = True


class EngineSettings(BaseSettings):
    """Engine behaviour."""
    model_config = SettingsConfigDict(env_prefix="ENGINE_")

    cache_enabled: bool = True
    debug_mode: bool = False


class LoggingSettings(BaseSettings):
    """Logging configuration."""
    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = "INFO"
    json_format: bool = False


class Settings(BaseSettings):
    """Main application settings."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    storage: StorageSettings = Field(default_factory=StorageSettings)
    supabase: SupabaseSettings = Field(default_factory=SupabaseSettings)
    remote: RemoteSettings = Field(default_factory=RemoteSettings)
    engine: EngineSettings = Field(default_factory=EngineSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
