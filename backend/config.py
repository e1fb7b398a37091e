from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_env: str = "dev"

    openai_api_key: str | None = None
    report_model: str = "gpt-4o-mini"
    report_temperature: float = 0.2
    # Extended reasoning budget ("low", "medium", "high") for reasoning models.
    report_reasoning_effort: str | None = None
    allowed_origins: str = "http://localhost:8501"


settings = Settings()
