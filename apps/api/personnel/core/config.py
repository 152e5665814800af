from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str
    jwt_secret_key: str = "your-secret-key-change-in-production"  # Default for development
    access_token_expire_minutes: int = 60 * 8
    remember_me_expire_days: int = 30

    # bcrypt cost factor; tests drop this to the minimum
    bcrypt_rounds: int = 12

    # Actor recorded in the audit trail when nobody is logged in
    default_actor: str = "System"
    currency_symbol: str = "$"

    environment: str = "development"
    log_level: str = "INFO"

    # Comma-separated list, e.g. "http://localhost:8081,https://hr.example.com"
    cors_origins: str = ""

    auto_create_schema: bool = False
    seed_demo_data: bool = False

    class Config:
        env_file = ".env"


settings = Settings()
