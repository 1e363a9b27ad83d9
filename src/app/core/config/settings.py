"""Application configuration using Pydantic Settings with YAML support.

Configuration is organised into nested sections (one per concern) that are
populated from, in increasing priority:

- defaults declared on the models below
- ``config/base/*.yaml``
- ``config/environments/{APP_ENV}/*.yaml``
- ``.env`` and environment variables (``SECTION__FIELD`` for nested values)

Secrets are flat, env-only fields and never live in YAML.
"""

from __future__ import annotations

from enum import StrEnum
from functools import lru_cache
from typing import TYPE_CHECKING
from urllib.parse import quote_plus

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

from .yaml_source import MultiYamlConfigSettingsSource

if TYPE_CHECKING:
    from pydantic_settings import PydanticBaseSettingsSource

class AuthMode(StrEnum):
    """Authentication mode configuration.

    Determines how the bearer credential is resolved to an identity:
    - LOCAL_JWT: Verify JWTs locally using the shared secret
    - HEADER: Trust identity headers set by an upstream gateway
    - DISABLED: No authentication required (local development only)
    """

    LOCAL_JWT = "local_jwt"
    HEADER = "header"
    DISABLED = "disabled"


# =============================================================================
# Nested Configuration Models (from YAML)
# =============================================================================

class AppSettings(BaseModel):
    """Application identity settings."""

    name: str = "Recipe Community Service"
    version: str = "0.1.0"
    debug: bool = False

class ServerSettings(BaseModel):
    """Server configuration settings."""

    host: str = "127.0.0.1"
    port: int = 8000

class ApiSettings(BaseModel):
    """API configuration settings."""

    v1_prefix: str = "/api/v1"
    cors_origins: list[str] = []

class JwtSettings(BaseModel):
    """JWT token settings."""

    algorithm: str = "HS256"

class AuthHeaderSettings(BaseModel):
    """Header-based auth settings."""

    user_id: str = "X-User-ID"
    email: str = "X-User-Email"
    roles: str = "X-User-Roles"
    permissions: str = "X-User-Permissions"

class AuthJwtValidationSettings(BaseModel):
    """JWT validation settings."""

    issuer: str | None = None
    audience: list[str] = []

class AuthSettings(BaseModel):
    """Authentication configuration settings."""

    mode: str = "local_jwt"
    # Identity that is granted the admin role at the gateway boundary.
    admin_email: str = "admin@recipe.com"
    jwt: JwtSettings = JwtSettings()
    headers: AuthHeaderSettings = AuthHeaderSettings()
    jwt_validation: AuthJwtValidationSettings = AuthJwtValidationSettings()

class RedisSettings(BaseModel):
    """Redis configuration settings."""

    host: str = "localhost"
    port: int = 6379
    user: str | None = None  # Redis ACL username (Redis 6.0+)
    cache_db: int = 0
    queue_db: int = 1
    rate_limit_db: int = 2

class MongoSettings(BaseModel):
    """MongoDB document store settings."""

    host: str = "localhost"
    port: int = 27017
    name: str = "recipe_app"
    user: str | None = None
    auth_source: str = "admin"
    min_pool_size: int = 0
    max_pool_size: int = 50
    server_selection_timeout_ms: int = 5000
    tls: bool = False

class RateLimitingSettings(BaseModel):
    """Rate limiting configuration."""

    default: str = "100/minute"
    social: str = "60/minute"
    comments: str = "20/minute"

class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    level: str = "INFO"
    format: str = "json"

class TracingSettings(BaseModel):
    """Tracing configuration settings."""

    enabled: bool = True
    otlp_endpoint: str | None = None

class MetricsSettings(BaseModel):
    """Metrics configuration settings."""

    enabled: bool = True

class ObservabilitySettings(BaseModel):
    """Observability configuration settings."""

    tracing: TracingSettings = TracingSettings()
    metrics: MetricsSettings = MetricsSettings()

class ModerationSettings(BaseModel):
    """Moderation workflow settings."""

    # When enabled, an owner's edit of a rejected recipe sends it back to review.
    resubmit_on_edit: bool = False

class ShoppingSettings(BaseModel):
    """Shopping list aggregation settings."""

    # Normalise compatible units (g/kg, ml/l, ...) before summing amounts.
    convert_units: bool = False

class RecommendationsSettings(BaseModel):
    """Recommendation rendering settings."""

    cache_ttl: int = 900
    cache_key_prefix: str = "recommendations"
    limit: int = 12

class MaintenanceSettings(BaseModel):
    """Counter repair schedule."""

    repair_enabled: bool = True
    repair_hour: int = 3
    repair_minute: int = 30

class RecommendationEngineSettings(BaseModel):
    """AI recommendation scorer client configuration."""

    url: str | None = None
    timeout: float = 10.0

class DownstreamServicesSettings(BaseModel):
    """Configuration for downstream service clients."""

    recommendation_engine: RecommendationEngineSettings = (
        RecommendationEngineSettings()
    )

class ArqJobIdsSettings(BaseModel):
    """Centralized job IDs for ARQ background tasks.

    Fixed IDs deduplicate jobs: a job with an ID that is already queued or
    running is not created again.
    """

    counter_repair: str = "social_counter_repair"

class ArqSettings(BaseModel):
    """ARQ background worker configuration."""

    job_ids: ArqJobIdsSettings = ArqJobIdsSettings()
    queue_name: str = "recipes:queue:jobs"
    health_check_key: str = "recipes:queue:health-check"

# =============================================================================
# Main Settings Class
# =============================================================================

class Settings(BaseSettings):
    """Application settings with YAML + environment variable support.

    Environment variables can override any setting using the nested delimiter '__'.
    For example: MONGODB__HOST=mongo overrides mongodb.host.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        case_sensitive=False,
        env_nested_delimiter="__",
    )

    APP_ENV: str = "development"

    app: AppSettings = AppSettings()
    server: ServerSettings = ServerSettings()
    api: ApiSettings = ApiSettings()
    auth: AuthSettings = AuthSettings()
    redis: RedisSettings = RedisSettings()
    mongodb: MongoSettings = MongoSettings()
    rate_limiting: RateLimitingSettings = RateLimitingSettings()
    logging: LoggingSettings = LoggingSettings()
    observability: ObservabilitySettings = ObservabilitySettings()
    moderation: ModerationSettings = ModerationSettings()
    shopping: ShoppingSettings = ShoppingSettings()
    recommendations: RecommendationsSettings = RecommendationsSettings()
    maintenance: MaintenanceSettings = MaintenanceSettings()
    downstream_services: DownstreamServicesSettings = DownstreamServicesSettings()
    arq: ArqSettings = ArqSettings()

    # =========================================================================
    # Secrets (from .env only - never in YAML)
    # =========================================================================
    JWT_SECRET_KEY: str = ""
    REDIS_PASSWORD: str = ""
    MONGODB_PASSWORD: str = ""

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Place the YAML source below env vars and above Docker secrets."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            MultiYamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    @property
    def auth_mode_enum(self) -> AuthMode:
        """Get auth mode as enum with validation."""
        try:
            return AuthMode(self.auth.mode.lower())
        except ValueError:
            msg = (
                f"Invalid auth mode: {self.auth.mode}. "
                f"Must be one of: {', '.join(m.value for m in AuthMode)}"
            )
            raise ValueError(msg) from None

    def _build_redis_url(self, db: int) -> str:
        """Build Redis connection URL: redis://[user:password@]host:port/db."""
        auth_part = ""
        if self.redis.user and self.REDIS_PASSWORD:
            auth_part = f"{self.redis.user}:{self.REDIS_PASSWORD}@"
        elif self.REDIS_PASSWORD:
            auth_part = f":{self.REDIS_PASSWORD}@"
        elif self.redis.user:
            auth_part = f"{self.redis.user}@"

        return f"redis://{auth_part}{self.redis.host}:{self.redis.port}/{db}"

    @property
    def redis_cache_url(self) -> str:
        """Build Redis cache connection URL."""
        return self._build_redis_url(self.redis.cache_db)

    @property
    def redis_rate_limit_url(self) -> str:
        """Build Redis rate limit connection URL."""
        return self._build_redis_url(self.redis.rate_limit_db)

    @property
    def mongodb_url(self) -> str:
        """Build MongoDB connection URL.

        URL format: mongodb://[user:password@]host:port/?authSource=...

        Credentials are percent-encoded as the driver requires.
        """
        auth_part = ""
        query = ""
        if self.mongodb.user:
            auth_part = quote_plus(self.mongodb.user)
            if self.MONGODB_PASSWORD:
                auth_part += f":{quote_plus(self.MONGODB_PASSWORD)}"
            auth_part += "@"
            query = f"?authSource={self.mongodb.auth_source}"

        return f"mongodb://{auth_part}{self.mongodb.host}:{self.mongodb.port}/{query}"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.APP_ENV == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.APP_ENV == "production"

    @property
    def is_non_production(self) -> bool:
        """Check if API docs and detailed errors should be enabled."""
        return self.APP_ENV in ("local", "test", "development")

    @property
    def is_testing(self) -> bool:
        """Check if running in test environment."""
        return self.APP_ENV == "test"

@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

# Global settings instance for convenient imports
settings = get_settings()
