from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):

    # Database
    database_url: str


    # Auth/JWT
    access_token_expire_minutes: int = 30
    refresh_token_expire_days: int = 7
    jwt_algorithm: str = 'HS256'
    secret_key: str

    # Rate-Limit für Login
    login_rate_limit: str = "5/minute"
    rate_limit_enabled: bool = True

    # App
    app_name: str = 'Reservierungsportal'
    debug: bool = False
    log_dir: str = "logs"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",

    )

    # Restaurant-Zeitzone (wenn am Restaurant nichts hinterlegt ist)
    business_timezone: str = "Europe/Madrid"

    # Analytics
    analytics_default_period: str = "7d"
    default_total_capacity: int = 50


settings = Settings()
