"""Application settings loaded from environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central configuration — values come from .env or environment variables."""

    # Ollama
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "mistral"

    # Data paths (relative to project root)
    benchmarks_path: Path = Path("data/benchmarks/saas-stages.json")
    sessions_dir: Path = Path("data/sessions")

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
