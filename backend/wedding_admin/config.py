"""
Centralized application configuration.
"""
from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    app_name: str = "Wedding Admin API"
    debug: bool = False

    # Database (Supabase Postgres in production)
    database_url: str = "sqlite:///./data/wedding_admin.db"

    # Supabase
    supabase_url: str = "https://placeholder.supabase.co"
    supabase_anon_key: str = ""
    supabase_jwt_secret: str = ""
    supabase_jwt_audience: str = "authenticated"
    # Used for table inserts when set; falls back to the anon key
    supabase_service_role_key: str = ""

    # Role required in user_metadata to use the admin endpoints
    admin_role: str = "admin"

    # Edge functions
    create_couple_function: str = "create-couple"
    create_vendor_function: str = "create-vendor"

    # Finished or idle import sessions are dropped after this many seconds
    import_session_ttl_seconds: int = 3600

    # Comma separated extra origins
    cors_origins: str = ""

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get the cached application settings."""
    return Settings()
