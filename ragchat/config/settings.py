
from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):

    chroma_host: str = "localhost"
    chroma_port: int = 8001
    chroma_collection: str = "documents"
    chroma_tenant: str = "default_tenant"
    chroma_database: str = "default_database"

    embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2"
    embedding_batch_size: int = 32

    llm_base_url: str = "https://api.groq.com/openai/v1"
    llm_api_key: str = Field(
        default="", validation_alias=AliasChoices("llm_api_key", "groq_api_key")
    )
    llm_model: str = "llama-3.3-70b-versatile"
    llm_max_tokens: int = 1024
    llm_temperature: float = 0.7
    llm_timeout: float = 60.0

    tavily_api_key: str = ""
    web_search_url: str = "https://api.tavily.com/search"
    web_search_max_results: int = 3
    web_search_timeout: float = 20.0

    chunk_size: int = 800
    chunk_overlap: int = 200
    retrieval_k: int = 5
    relevance_floor: float = 0.3
    history_limit: int = 5
    title_max_length: int = 50

    # Empty -> in-memory conversation store
    database_url: str = ""

    # 0 keeps fail-once behaviour for every adapter call
    adapter_retries: int = 0
    retry_backoff_min_ms: int = 200
    retry_backoff_max_ms: int = 500

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

    @model_validator(mode="after")
    def _check_chunking(self) -> "Settings":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError(
                f"chunk_overlap ({self.chunk_overlap}) must be smaller than "
                f"chunk_size ({self.chunk_size})"
            )
        return self


settings = Settings()
