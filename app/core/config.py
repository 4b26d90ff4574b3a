# python
# app/core/config.py
"""Configuration settings for the Juridiko chat API.

Uses Pydantic BaseSettings for environment variable management.
"""
from enum import Enum

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentEnum(str, Enum):
    development = "development"
    testing = "testing"
    staging = "staging"
    production = "production"


class LogLevelEnum(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormatEnum(str, Enum):
    simple = "simple"
    json = "json"


# Fixed behaviour, intentionally not exposed as settings
CONTEXT_WINDOW = 30
PLACEHOLDER_PREFIX = "local_"
FALLBACK_REPLY = "Inget svar."
SYSTEM_PROMPT = (
    "Du är en svensk juridisk AI assistent för Juridiko. Svara på alla juridiska frågor "
    "och var professionell. Du ersätter inte en advokat. Lös användaren med deras juridiska "
    "frågor och problem. Kommunicera inte utanför din roll. Du är expert inom svenska lagar "
    "och hur juridik påverkar människor. Du sparar ingen information och följer GDPR. "
    "Var utförlig och tydlig, gör allt för att användaren ska bli nöjd."
)


class Settings(BaseSettings):
    # Pydantic v2 settings configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ===== Application Settings =====
    app_name: str = Field(default="Juridiko Chat API", description="Application name")
    environment: EnvironmentEnum = Field(
        default=EnvironmentEnum.development, description="Environment type"
    )
    debug: bool = Field(default=False, description="Debug mode")
    version: str = Field(default="1.0.0", description="Application version")

    # ===== Membership (Memberstack) =====
    memberstack_secret_key: str | None = Field(
        default=None, description="Memberstack admin secret key"
    )
    memberstack_api_url: AnyHttpUrl = Field(
        default="https://admin.memberstack.com", description="Memberstack admin API URL"
    )
    memberstack_timeout: float = Field(
        default=10.0, description="Memberstack request timeout in seconds"
    )
    pro_plan_id: str = Field(
        default="pln_juridiko-pro-ckbw0xts", description="Plan id that grants chat access"
    )
    pro_plan_alias: str = Field(
        default="juridiko-pro", description="Short-form alias of the PRO plan id"
    )

    # ===== Database Settings =====
    database_url: str | None = Field(default=None, description="Database connection URL")

    # Test database URL
    test_database_url: str | None = Field(default=None, description="Test database URL")

    # ===== AI Service (Gemini) =====
    gemini_api_key: str | None = Field(default=None, description="Google Gemini API key")
    gemini_model: str = Field(default="gemini-1.5-flash", description="Gemini model to use")
    gemini_max_tokens: int = Field(default=1000, description="Maximum tokens for Gemini")
    gemini_temperature: float = Field(default=0.7, description="Sampling temperature")
    ai_request_timeout: int = Field(default=30, description="AI request timeout in seconds")

    # ===== CORS Settings =====
    allowed_origin: str = Field(default="*", description="Value of Access-Control-Allow-Origin")

    @property
    def cors_headers(self) -> dict[str, str]:
        """Headers attached to every response, preflight included."""
        return {
            "Access-Control-Allow-Origin": self.allowed_origin,
            "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
            "Access-Control-Allow-Headers": "Content-Type, Accept, x-memberstack-token",
            "Access-Control-Allow-Credentials": "true",
        }

    # ===== Monitoring & Logging =====
    log_level: LogLevelEnum = Field(default=LogLevelEnum.INFO, description="Logging level")
    log_format: LogFormatEnum = Field(default=LogFormatEnum.json, description="Log format")

    # ===== Server Settings =====
    host: str = Field(default="127.0.0.1", description="Host to bind the server")
    port: int = Field(default=8000, description="Port to bind the server")

    # ===== Computed Properties =====
    @property
    def is_development(self) -> bool:
        return self.environment == EnvironmentEnum.development

    @property
    def is_production(self) -> bool:
        return self.environment == EnvironmentEnum.production

    @property
    def has_ai_enabled(self) -> bool:
        return bool(self.gemini_api_key)

    @property
    def has_membership_configured(self) -> bool:
        return bool(self.memberstack_secret_key)

    @property
    def memberstack_base_url(self) -> str:
        return str(self.memberstack_api_url).rstrip("/")

    # ===== Validation Methods =====
    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        if v and isinstance(v, str):
            lv = v.lower()
            if lv in ["dev", "develop"]:
                return "development"
            if lv in ["prod"]:
                return "production"
            return lv
        return v

    @field_validator("ai_request_timeout")
    @classmethod
    def validate_ai_timeout(cls, v):
        if v <= 0:
            raise ValueError("AI request timeout must be positive")
        return v


settings = Settings()


class ConfigValidator:
    @staticmethod
    def validate_required_settings(config: Settings | None = None):
        config = config or settings
        errors = []
        if not config.database_url:
            errors.append("DATABASE_URL is required")
        if not config.memberstack_secret_key:
            errors.append("MEMBERSTACK_SECRET_KEY is required")
        if config.is_production and not config.gemini_api_key:
            errors.append("GEMINI_API_KEY is required in production")
        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")

    @staticmethod
    def get_feature_status(config: Settings | None = None) -> dict:
        config = config or settings
        return {
            "ai_enabled": config.has_ai_enabled,
            "membership_configured": config.has_membership_configured,
            "environment": config.environment,
        }


def get_config_summary(config: Settings | None = None) -> dict:
    config = config or settings
    return {
        "app_name": config.app_name,
        "version": config.version,
        "environment": config.environment,
        "debug": config.debug,
        "features": ConfigValidator.get_feature_status(config),
        "database_configured": bool(config.database_url),
    }


__all__ = [
    "settings",
    "Settings",
    "ConfigValidator",
    "get_config_summary",
    "EnvironmentEnum",
    "LogLevelEnum",
    "LogFormatEnum",
    "CONTEXT_WINDOW",
    "PLACEHOLDER_PREFIX",
    "FALLBACK_REPLY",
    "SYSTEM_PROMPT",
]
