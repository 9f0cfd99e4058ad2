import os
from pydantic_settings import BaseSettings


def _parse_cors_origins() -> list[str] | None:
    """Parse CORS_ORIGINS env var as comma-separated string or JSON list."""
    raw = os.environ.get("CORS_ORIGINS")
    if not raw:
        return None
    if raw.startswith("["):
        import json
        return json.loads(raw)
    return [o.strip() for o in raw.split(",") if o.strip()]


class Settings(BaseSettings):
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash-lite"
    gemini_fallback_model: str = "gemini-2.5-flash"
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]
    debug: bool = False
    log_level: str = "INFO"

    # Feature extraction
    extractor_mode: str = "auto"  # "auto" | "llm" | "heuristic"
    extractor_timeout_seconds: float = 30.0
    extractor_retries: int = 3
    extractor_base_delay_seconds: float = 1.0
    extractor_exponential_backoff: bool = True

    # Embeddings
    embedding_model_name: str = "sentence-transformers/all-MiniLM-L6-v2"
    embedding_cache_ttl_seconds: float = 3600.0
    embedding_cache_max_size: int = 1000

    # Batch matching
    batch_size: int = 3
    batch_delay_seconds: float = 1.0

    # Input validation
    min_job_description_length: int = 100
    min_resume_length: int = 50

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "protected_namespaces": ("settings_",)}


_cors_override = _parse_cors_origins()
settings = Settings(**{"cors_origins": _cors_override} if _cors_override else {})
