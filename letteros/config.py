from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    # AWS (Cognito identity tokens, SES delivery)
    aws_region: str = "us-east-1"

    # Email Settings
    from_email: str
    support_email: Optional[str] = None
    ses_configuration_set: Optional[str] = None
    sender_name: str = "LetterOS"

    # Database Settings
    database_url: Optional[str] = None
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10

    # App Settings
    frontend_url: str = "http://localhost:3000"
    backend_url: str = "http://localhost:8000"
    environment: str = "development"

    # Session Cookie Settings
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    session_cookie_name: str = "session"
    session_expire_days: int = 5
    cookie_domain: Optional[str] = None
    cookie_secure: bool = False  # Set to True in production with HTTPS
    cookie_samesite: str = "lax"
    cookie_httponly: bool = True

    # AI Settings
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    ai_temperature: float = 0.7
    ai_max_output_tokens: int = 2000
    variant_temperature: float = 0.8
    variant_max_output_tokens: int = 4000
    series_max_output_tokens: int = 8000
    ai_timeout_seconds: float = 60.0
    prompt_version: str = "v1"
    planning_max_turns: int = 10

    # Subscriber import
    import_batch_size: int = 500
    import_preview_rows: int = 10

    # Launch content outbox
    outbox_path: str = "data/outbox.sqlite3"
    remote_write_timeout_seconds: float = 3.0
    outbox_reconcile_interval_seconds: int = 60

    # Newsletter delivery
    send_batch_size: int = 10
    send_batch_pause_seconds: float = 1.0

    class Config:
        env_file = ".env"
        extra = "ignore"  # This line allows extra env vars without errors

settings = Settings()
