from typing import List, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application Information
    app_name: str = Field(default="Forum API")
    app_description: str = Field(default="Blogging and discussion forum backend")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=True)
    production: bool = Field(default=False)
    timezone: str = Field(default="UTC")

    # Database Configuration
    db_connection: str = Field(default="postgresql+psycopg2")
    db_host: str = Field(default="127.0.0.1")
    db_port: int = Field(default=5432)
    db_database: str = Field(default="forum")
    db_username: str = Field(default="forum")
    db_password: str = Field(default="forum")
    # Full URL wins over the individual parts when set (e.g. sqlite:///./forum.db)
    database_url: Optional[str] = Field(default=None)

    # Security Settings
    cors_allowed_origins: List[str] = Field(default=["http://localhost:3000"])

    # JWT Configuration
    jwt_secret: str = Field(default="your-secret-key-change-in-production")
    jwt_algorithm: str = Field(default="HS256")
    jwt_user_expiration: int = Field(default=7)
    jwt_issuer: str = Field(default="Forum API")

    # Redis / token blacklist
    redis_url: str = Field(default="redis://localhost:6379")
    token_blacklist_backend: str = Field(default="redis")
    token_blacklist_ttl: int = Field(default=3600)
    redis_socket_timeout: float = Field(default=2.0)

    # Password hashing (bcrypt cost factor)
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    # Rate limiting
    rate_limit_storage_uri: str = Field(default="redis://localhost:6379")
    redis_rate_limit: str = Field(default="60/minute")
    auth_rate_limit: str = Field(default="20/minute")

    # Logging
    log_level: str = Field(default="info")
    log_file: str = Field(default="logs/app.log")

    # Pagination
    default_page_size: int = Field(default=10)
    max_page_size: int = Field(default=100)

    # Comments
    max_reply_depth: int = Field(default=3)

    # Admin Defaults
    admin_default_username: str = Field(default="admin")
    admin_default_full_name: str = Field(default="Super Admin")
    admin_default_email: str = Field(default="admin@example.com")
    admin_default_password: str = Field(default="Admin@123")

    @property
    def sqlalchemy_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        return "{driver}://{user}:{password}@{host}:{port}/{database}".format(
            driver=self.db_connection,
            user=self.db_username,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_database,
        )

    # ============================
    # Generic comma-separated parser
    # ============================
    @staticmethod
    def _parse_csv(value, default):
        if isinstance(value, str):
            items = [x.strip() for x in value.split(",") if x.strip()]
            return items if items else default
        if isinstance(value, list):
            return value
        return default

    @field_validator("cors_allowed_origins", mode="before")
    def validate_cors(cls, v):
        return cls._parse_csv(v, ["http://localhost:3000"])

    @field_validator("token_blacklist_backend")
    def validate_blacklist_backend(cls, v):
        if v not in ("redis", "memory"):
            raise ValueError("token_blacklist_backend must be 'redis' or 'memory'")
        return v

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


def load_settings():
    try:
        settings = Settings()
        print("✅ Settings loaded successfully!")
        return settings
    except ValidationError as e:
        print("❌ Validation Error:", e)
        raise


settings = load_settings()
