"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Folio Records")
    app_env: str = Field(default="development")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # Database
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/folio",
        description="PostgreSQL connection URL with asyncpg driver",
    )

    # For testing with SQLite
    test_database_url: str = Field(
        default="sqlite+aiosqlite:///./test.db",
        description="Test database URL",
    )

    # Address derivation
    program_id: str = Field(
        default="b362d8582156f76ff65e107520a51dfcedfb921edb982e9506825ef68ed9cf25",
        description="Hex encoded 32-byte identity used as the derivation domain",
    )

    # Record storage
    deposit_per_byte: int = Field(
        default=6960,
        ge=0,
        description="Deposit charged per allocated byte, refunded on close",
    )
    max_record_size: int = Field(
        default=10240,
        gt=0,
        description="Largest record the store will allocate",
    )

    @field_validator("program_id")
    @classmethod
    def _validate_program_id(cls, value: str) -> str:
        raw = bytes.fromhex(value)
        if len(raw) != 32:
            raise ValueError("program_id must encode exactly 32 bytes")
        return value.lower()

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
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
