from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database_url: str = "sqlite:///./thyrotrack.db"
    app_env: str = "dev"
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    log_level: str = "INFO"

    openai_api_key: str | None = None
    summary_model: str = "gpt-4o"
    extraction_model: str = "gpt-4o-mini"
    llm_timeout_seconds: float = 120.0
    api_base_url: str = "http://localhost:8000"
    allowed_origins: str = "http://localhost:8501"

    records_storage_key: str = "thyrotrack_records"
    profile_storage_key: str = "thyrotrack_profile"
    classifier_fuzzy_threshold: int = 85
    max_report_text_chars: int = 20000


settings = Settings()
