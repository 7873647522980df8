
from pydantic_settings import BaseSettings


class Settings(BaseSettings):

    llm_base_url: str = "http://localhost:11434/v1"
    llm_api_key: str = "ollama"
    llm_model: str = "qwen2.5:7b"
    llm_max_tokens: int = 1024
    llm_personal_max_tokens: int = 180
    llm_temperature: float = 0.3
    llm_top_p: float = 0.9

    content_path: str = "./content"
    resume_pdf_path: str = "./public/resume/resume.pdf"
    boosts_path: str = "boosts.json"

    chunk_size: int = 1100
    chunk_overlap: int = 180

    # Index store: "file" or "http"
    index_backend: str = "file"
    index_path: str = "./indexes"
    index_base_url: str = ""
    index_timeout: float = 10.0
    index_cache: bool = True

    rag_top_k: int = 12
    rag_max_snippets: int = 4
    rag_snippet_length: int = 400
    # "boost" keeps other documents, "filter" drops them
    rag_scope_mode: str = "boost"
    rag_allow_no_context: bool = False
    # "heuristic" or "cross_encoder"
    rag_scorer: str = "heuristic"
    reranker_model: str = "BAAI/bge-reranker-v2-m3"

    router_config_path: str = "router_config.json"
    router_debug: bool = False

    allow_personal: bool = False
    contact_url: str = "https://cal.com"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
