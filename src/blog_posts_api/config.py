"""Application configuration via environment variables."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    """Service configuration loaded from environment variables (and an optional .env)."""

    model_config = SettingsConfigDict(
        env_prefix="", env_file=".env", extra="ignore", frozen=True
    )

    # Store
    db_host: str = Field(default="localhost", description="MySQL host")
    db_port: int = Field(default=3306, description="MySQL port")
    db_username: str = Field(default="root", description="MySQL user")
    db_password: str = Field(default="", description="MySQL password")
    db_name: str = Field(default="myblogposts_db", description="MySQL database name")
    database_url: str | None = Field(
        default=None,
        description="Full SQLAlchemy async URL; overrides the DB_* connection parts",
    )
    db_pool_size: int = Field(default=10, ge=1, description="Pooled store connections")
    db_pool_recycle: int = Field(
        default=3600, description="Seconds before a pooled connection is recycled"
    )
    create_schema: bool = Field(
        default=False, description="Create the posts table at startup if it is missing"
    )

    # Admin identity
    admin_username: str = Field(description="Username of the single admin account")
    admin_password: str = Field(description="Password of the single admin account")

    # Tokens
    jwt_secret: str | None = Field(default=None, description="Bearer token signing secret")
    token_ttl_seconds: int = Field(default=3600, gt=0, description="Bearer token lifetime")

    # Rate limiting
    rate_limit_requests: int = Field(default=100, gt=0, description="Requests per window")
    rate_limit_window_seconds: int = Field(
        default=120, gt=0, description="Rate limit window length in seconds"
    )

    # Server
    host: str = Field(default="0.0.0.0", description="Server bind host")
    port: int = Field(default=3000, description="Server bind port")
    log_level: str = Field(default="info", description="Log level")

    @field_validator("jwt_secret")
    @classmethod
    def _blank_secret_is_unset(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v

    @property
    def database_dsn(self) -> str:
        """SQLAlchemy URL for the posts store."""
        if self.database_url:
            return self.database_url
        url = URL.create(
            "mysql+aiomysql",
            username=self.db_username,
            password=self.db_password or None,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )
        return url.render_as_string(hide_password=False)
