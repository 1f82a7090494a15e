"""Configuration management for the JMRL pool service."""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    version: str = Field(default="1.0.0")

    # Upstream JMRL (Sierra) API
    jmrl_api: str = Field(default="", alias="JMRL_API")
    jmrl_api_key: str = Field(default="", alias="JMRL_API_KEY")
    jmrl_api_secret: str = Field(default="", alias="JMRL_API_SECRET")
    connect_timeout: float = Field(default=2.0, gt=0, alias="JMRL_CONNECT_TIMEOUT")
    read_timeout: float = Field(default=5.0, gt=0, alias="JMRL_READ_TIMEOUT")
    pool_size: int = Field(default=100, ge=1, alias="JMRL_POOL_SIZE")
    page_size: int = Field(default=20, ge=1, le=100, alias="JMRL_PAGE_SIZE")

    # JWT signature key; auth is disabled when empty
    jwt_key: str = Field(default="", alias="JWT_KEY")

    # Server settings
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8080, alias="PORT")
    log_file: str = Field(default="", alias="LOG_FILE")

    # Record presentation
    library_name: str = Field(default="Jefferson-Madison Regional Library", alias="LIBRARY_NAME")

    # How identifier: clauses are handled. JMRL has no identifier index, so
    # they are rejected unless mapped onto the barcode / call number fields.
    identifier_policy: Literal["reject", "barcode_or_call_number"] = Field(
        default="reject", alias="IDENTIFIER_POLICY"
    )

    i18n_dir: Path = Field(default=Path(__file__).resolve().parent.parent / "i18n", alias="I18N_DIR")

    @property
    def auth_enabled(self) -> bool:
        return bool(self.jwt_key)

    def missing_required(self) -> list[str]:
        """Names of required upstream settings that are not set."""
        missing = []
        if not self.jmrl_api:
            missing.append("api")
        if not self.jmrl_api_key:
            missing.append("apikey")
        if not self.jmrl_api_secret:
            missing.append("apisecret")
        return missing


# Global settings instance
settings = Settings()
