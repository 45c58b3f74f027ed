from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    host: str = "127.0.0.1"
    port: int = 0  # 0 = pick a free port
    log_level: str = "INFO"

    ollama_base_url: str = "http://localhost:11434"
    generate_timeout_s: float = 30.0
    availability_timeout_s: float = 2.0
    pull_grace_period_s: float = 0.5  # lets Ollama finalize the model on disk
    temperature: float = 0.1
    num_predict: int = 512
    min_words: int = 3

    model_config = {"env_prefix": "AI_ENHANCE_"}


settings = Settings()
