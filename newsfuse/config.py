from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Completion service
    completion_provider: str = "pollinations"  # pollinations | openrouter | disabled
    completion_model: str = "openai/gpt-4o-mini"
    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    pollinations_base_url: str = "https://text.pollinations.ai"
    pollinations_max_get_chars: int = 2000
    completion_max_tokens: int = 800

    # Outbound timeouts (seconds)
    source_fetch_timeout_s: float = 8.0
    classify_timeout_s: float = 8.0
    selection_timeout_s: float = 15.0
    deep_fetch_timeout_s: float = 20.0
    summarize_timeout_s: float = 20.0
    merge_timeout_s: float = 25.0

    # Source fetching
    user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) Chrome/120 Safari/537.36"
    max_anchors_per_source: int = 80
    min_link_text_length: int = 15
    max_description_chars: int = 300

    # Scoring
    score_title_hit: int = 10
    score_title_prefix: int = 15
    score_description_hit: int = 5
    score_url_hit: int = 3
    score_recency_boost: int = 8
    score_short_title_penalty: int = 5
    score_short_title_length: int = 20
    min_score: int = 10

    # Ranking / response
    default_limit: int = 20
    max_limit: int = 50

    # Cache
    cache_ttl_s: int = 600
    cache_capacity: int = 256
    max_cache_ttl_s: int = 86400

    # Deep fetch + summarization
    selection_pool_size: int = 10
    deep_fetch_count: int = 3
    deep_fetch_delay_s: float = 2.0
    deep_fetch_concurrency: int = 1
    summarize_delay_s: float = 2.0
    max_article_chars: int = 20000
    chunk_max_chars: int = 3000
    points_per_chunk: int = 3
    max_points_per_article: int = 50
    summary_points: int = 5

    # App
    cors_origins: str = "*"
    app_log_level: str = "INFO"
    noisy_log_level: str = "WARNING"
    log_dir: str = "logs"
    log_to_file: bool = True

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
