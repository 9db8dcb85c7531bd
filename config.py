from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PKG_DIR = Path(__file__).resolve().parent
ENV_PATH = PKG_DIR / ".env"


class Settings(BaseSettings):
    # Graph API
    access_token: str | None = Field(
        default=None, validation_alias="FEBL_ACCESS_TOKEN"
    )
    graph_base_url: str = Field(
        "https://graph.facebook.com", validation_alias="FEBL_GRAPH_BASE_URL"
    )
    graph_api_version: str = Field(
        "v2.8", validation_alias="FEBL_GRAPH_VERSION"
    )

    # Search defaults
    default_distance: int = Field(
        100, validation_alias="FEBL_DEFAULT_DISTANCE"
    )
    default_limit: int = Field(
        100, validation_alias="FEBL_DEFAULT_LIMIT"
    )

    # HTTP client
    http_timeout_seconds: float = Field(
        8.0, validation_alias="HTTP_TIMEOUT_SECONDS"
    )
    request_deadline_seconds: float = Field(
        30.0, validation_alias="REQUEST_DEADLINE_SECONDS"
    )

    # Server
    cors_whitelist: str = Field(
        "", validation_alias="FEBL_CORS_WHITELIST"
    )
    host: str = Field("0.0.0.0", validation_alias="HOST")
    port: int = Field(8000, validation_alias="PORT")

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def cors_origins(self) -> list[str]:
        """Comma separated whitelist; empty means every origin is allowed."""
        return [o.strip() for o in self.cors_whitelist.split(",") if o.strip()]


settings = Settings()
