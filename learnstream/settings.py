## Application settings configuration

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    env: str = "dev"
    database_url: str = "sqlite:///./learnstream.db"
    redis_url: str = "redis://localhost:6379/0"
    log_level: str = "INFO"

    # "local" runs enrichment inside the API process, "redis" hands it to the worker
    enrichment_backend: str = "local"

    # Ollama settings
    ollama_base_url: str = "http://localhost:11434/v1"
    ollama_model: str = "llama3.1"

    # Production settings
    LLM_PROVIDER: str = "ollama"
    GROQ_API_KEY: str | None = None
    GROQ_BASE_URL: str = "https://api.groq.com/openai/v1"
    GROQ_MODEL: str = "llama-3.1-8b-instant"

    # Link checking
    link_check_timeout_ms: int = 5000
    link_check_max_retries: int = 3
    link_check_backoff_base_ms: int = 100

    # Step enrichment
    validation_concurrency: int = 5
    max_resources_per_step: int = 5
    min_resources_before_fallback: int = 3
    failure_fallback_count: int = 3

    # Plan scheduling
    step_concurrency: int = 1
    max_concurrent_plans: int = 4


settings = Settings()
