from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8080
    api_base_url: str = "http://localhost:8080"  # Base URL used to build each video's dataUrl
    store_backend: str = "memory"  # "memory" or "sql"
    db_url: str = "sqlite:///./videos.db"
    data_backend: str = "local"  # "local" or "s3"
    data_dir: str = "./video-data"  # Directory for video payloads when data_backend is "local"
    aws_region: str = "us-east-1"
    s3_bucket: str = "video-service-data"
    user_header: str = "X-User"  # Header carrying the caller identity set by the auth proxy
    max_upload_bytes: int = 100 * 1024 * 1024  # 100MB
    allowed_origins: str = ""  # Extra comma-separated CORS origins

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )


settings = Settings()
