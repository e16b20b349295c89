from __future__ import annotations

from functools import lru_cache
from urllib.parse import quote_plus

from pydantic import Field, PostgresDsn, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _build_postgres_dsn(
    *,
    host: str,
    port: int,
    name: str,
    user: str,
    password: str,
    ssl_mode: str,
) -> str:
    encoded_user = quote_plus(user)
    encoded_password = quote_plus(password) if password else ""
    auth = f"{encoded_user}:{encoded_password}" if encoded_password else encoded_user
    dsn = f"postgresql://{auth}@{host}:{port}/{name}"
    if ssl_mode:
        dsn = f"{dsn}?sslmode={quote_plus(ssl_mode)}"
    return dsn


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = Field(default="development", validation_alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    db_host: str = Field(default="localhost", validation_alias="DB_HOST")
    db_port: int = Field(default=5432, validation_alias="DB_PORT")
    db_name: str = Field(default="bsgold_dev", validation_alias="DB_NAME")
    db_user: str = Field(default="bsgold", validation_alias="DB_USER")
    db_password: str = Field(default="bsgold", validation_alias="DB_PASSWORD")
    db_ssl_mode: str = Field(default="prefer", validation_alias="DB_SSL_MODE")
    db_create_tables: bool = Field(default=False, validation_alias="DB_CREATE_TABLES")

    database_url: PostgresDsn | None = Field(default=None, validation_alias="DATABASE_URL")

    frontend_origins: str = Field(
        default="http://localhost:3000",
        validation_alias="FRONTEND_ORIGINS",
    )

    public_base_url: str = Field(default="http://localhost:8000", validation_alias="API_ROOT")

    whatsapp_api_root: str = Field(
        default="https://graph.facebook.com",
        validation_alias="WHATSAPP_API_ROOT",
    )
    whatsapp_api_version: str = Field(default="v17.0", validation_alias="WHATSAPP_API_VERSION")
    whatsapp_phone_id: str = Field(default="", validation_alias="WHATSAPP_PHONE_ID")
    whatsapp_access_token: str = Field(default="", validation_alias="WHATSAPP_ACCESS_TOKEN")
    whatsapp_request_timeout_seconds: float = Field(
        default=15.0,
        validation_alias="WHATSAPP_REQUEST_TIMEOUT_SECONDS",
    )

    media_allowed_hosts: str = Field(
        default="lookaside.fbsbx.com,scontent.whatsapp.net,mmg.whatsapp.net,pps.whatsapp.net",
        validation_alias="MEDIA_ALLOWED_HOSTS",
    )
    media_fetch_timeout_ms: int = Field(default=30_000, validation_alias="MEDIA_FETCH_TIMEOUT_MS")
    media_proxy_user_agent: str = Field(
        default="BSGold-Media-Proxy/1.0",
        validation_alias="MEDIA_PROXY_USER_AGENT",
    )
    media_storage_dir: str = Field(default="uploads/media", validation_alias="MEDIA_STORAGE_DIR")
    upload_max_size_bytes: int = Field(
        default=50 * 1024 * 1024,
        validation_alias="UPLOAD_MAX_SIZE_BYTES",
    )
    upload_allowed_mime_types: str = Field(
        default=(
            "image/jpeg,image/png,image/gif,image/webp,"
            "video/mp4,video/quicktime,"
            "audio/mpeg,audio/mp4,audio/ogg,"
            "application/octet-stream"
        ),
        validation_alias="UPLOAD_ALLOWED_MIME_TYPES",
    )

    @computed_field
    @property
    def database_dsn(self) -> str:
        if self.database_url is not None:
            return str(self.database_url)
        return _build_postgres_dsn(
            host=self.db_host,
            port=self.db_port,
            name=self.db_name,
            user=self.db_user,
            password=self.db_password,
            ssl_mode=self.db_ssl_mode,
        )

    @property
    def frontend_origin_list(self) -> list[str]:
        return _split_csv(self.frontend_origins)

    @property
    def media_allowed_host_list(self) -> list[str]:
        return [host.lower() for host in _split_csv(self.media_allowed_hosts)]

    @property
    def upload_allowed_mime_type_list(self) -> list[str]:
        return [item.lower() for item in _split_csv(self.upload_allowed_mime_types)]


@lru_cache
def get_settings() -> Settings:
    return Settings()
