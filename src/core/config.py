"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Web keys copied from setup guides ("YOUR_API_KEY") are treated as absent.
PLACEHOLDER_KEY_MARKER = "YOUR"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Pilosopo API")
    app_env: str = Field(default="development")
    debug: bool = Field(default=False)

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000)

    # Record-store
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/angry",
        description="PostgreSQL connection URL with asyncpg driver",
    )
    db_connect_retry_seconds: float = Field(
        default=5.0,
        description="Fixed delay between record-store connection attempts",
    )

    # Firebase
    firebase_api_key: str = Field(
        default="",
        description="Firebase Web API key used for the password-grant endpoint",
    )
    google_service_key: str = Field(
        default="",
        description="Inline service account JSON (takes precedence over the path)",
    )
    firebase_credentials_path: str = Field(
        default="",
        description="Path to a service account JSON file",
    )
    firebase_project_id: str = Field(default="")
    identity_toolkit_url: str = Field(
        default="https://identitytoolkit.googleapis.com/v1",
    )
    provider_http_timeout_seconds: float = Field(default=10.0)
    provider_list_limit: int = Field(default=1000)
    users_collection: str = Field(default="users")

    # Credentials
    derived_email_domain: str = Field(
        default="example.com",
        description="Domain appended to usernames to form the provider's unique handle",
    )
    password_hash_rounds: int = Field(default=10)
    allow_unverified_provider_login: bool = Field(
        default=True,
        description=(
            "Allow login by provider account lookup without a password check "
            "when neither the web key nor a stored hash is available"
        ),
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed origins",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def async_database_url(self) -> str:
        """Ensure the database URL uses the asyncpg driver scheme.

        Hosting providers supply a standard ``postgresql://`` URL.
        SQLAlchemy's async engine requires ``postgresql+asyncpg://``.
        """
        url = self.database_url
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    @computed_field  # type: ignore[prop-decorator]
    @property
    def firebase_api_key_present(self) -> bool:
        """Whether any web key value was supplied."""
        return bool(self.firebase_api_key.strip())

    @computed_field  # type: ignore[prop-decorator]
    @property
    def firebase_api_key_valid(self) -> bool:
        """Whether the web key is usable for delegated password checks."""
        return is_plausible_web_key(self.firebase_api_key)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


def is_plausible_web_key(key: str | None) -> bool:
    """A web key is plausible when non-blank and not a placeholder."""
    if not key or not key.strip():
        return False
    return PLACEHOLDER_KEY_MARKER not in key.upper()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
