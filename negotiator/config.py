from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # API credentials (empty key = fallback-only mode)
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"

    # LLM defaults
    default_model: str = "gpt-4o-mini"
    default_temperature: float = 0.7
    basic_max_tokens: int = 300
    advanced_max_tokens: int = 500

    # Timeouts (seconds)
    basic_timeout_sec: float = 30.0
    advanced_timeout_sec: float = 60.0

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
