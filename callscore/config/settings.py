from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class BedrockConfig(BaseSettings):
    """Amazon Bedrock configuration."""

    region: str = Field(
        default="us-east-1",
        validation_alias="BEDROCK_REGION",
    )
    model_id: str = Field(
        default="amazon.nova-pro-v1:0",
        validation_alias="BEDROCK_MODEL_ID",
    )
    audio_model_id: Optional[str] = Field(
        default=None,
        validation_alias="BEDROCK_AUDIO_MODEL_ID",
        description="Model used for transcription; falls back to model_id.",
    )
    max_tokens: int = Field(
        default=4096,
        validation_alias="BEDROCK_MAX_TOKENS",
        ge=1,
        le=8192,
    )
    temperature: float = Field(
        default=0.0,
        validation_alias="BEDROCK_TEMPERATURE",
        ge=0.0,
        le=1.0,
    )
    analysis_temperature: float = Field(
        default=0.1,
        validation_alias="BEDROCK_ANALYSIS_TEMPERATURE",
        ge=0.0,
        le=0.3,
    )
    top_p: float = Field(
        default=0.9,
        validation_alias="BEDROCK_TOP_P",
        ge=0.0,
        le=1.0,
    )
    access_key: Optional[str] = Field(default=None, validation_alias="AWS_ACCESS_KEY_ID")
    secret_key: Optional[str] = Field(default=None, validation_alias="AWS_SECRET_ACCESS_KEY")
    api_key: SecretStr | None = Field(
        default=None,
        validation_alias="BEDROCK_API_KEY",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class ScoringConfig(BaseSettings):
    """Transcription and scoring prompt configuration."""

    transcription_language: str = "Hindi"
    agent_label: str = "Agent"
    customer_label: str = "Customer"
    max_upload_bytes: int = Field(default=25 * 1024 * 1024, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="SCORING_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class HistoryConfig(BaseSettings):
    """Durable history store configuration."""

    store_path: str = "data/history.json"
    storage_key: str = "history"

    model_config = SettingsConfigDict(
        env_prefix="HISTORY_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "Call Quality Scoring Service"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_file: str = "logs/app.log"
    pipeline_log_file: str = "logs/scoring_pipeline.log"
    transcript_log_file: str = "logs/transcripts.log"

    # Bedrock
    bedrock: BedrockConfig = Field(default_factory=BedrockConfig)

    # Scoring
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)

    # History
    history: HistoryConfig = Field(default_factory=HistoryConfig)

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
