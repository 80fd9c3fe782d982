"""Configuration management for the newsrag service."""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

env_path = Path(__file__).parent.parent / ".env"

if env_path.exists():
    load_dotenv(env_path)


class Config:
    """Application configuration loaded from environment variables."""

    # OpenAI Configuration
    @classmethod
    def get_openai_api_key(cls) -> str:
        """Get OpenAI API key from environment variables.

        Returns:
            OpenAI API key from environment or empty string if not set.
        """
        return os.getenv("OPENAI_API_KEY", "")

    OPENAI_BASE_URL: str | None = os.getenv("OPENAI_BASE_URL")

    # Logging Configuration
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    OPENAI_LOG_LEVEL: str = os.getenv("OPENAI_LOG_LEVEL", "WARNING").upper()

    # Application Settings
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Model Configuration
    EMBEDDING_MODEL: str = os.getenv("EMBEDDING_MODEL", "text-embedding-3-small")
    CHAT_MODEL: str = os.getenv("CHAT_MODEL", "gpt-4.1-nano-2025-04-14")
    CHAT_MAX_TOKENS: int = int(os.getenv("CHAT_MAX_TOKENS", "1024"))
    CHAT_TEMPERATURE: float = float(os.getenv("CHAT_TEMPERATURE", "0.7"))

    # Chunking Configuration
    CHUNK_TARGET_WORDS: int = int(os.getenv("CHUNK_TARGET_WORDS", "450"))
    INGEST_CHUNK_WORDS: int = int(os.getenv("INGEST_CHUNK_WORDS", "400"))

    # Ingestion Configuration
    EMBED_BATCH_SIZE: int = int(os.getenv("EMBED_BATCH_SIZE", "10"))
    EMBED_BATCH_DELAY_SECONDS: float = float(
        os.getenv("EMBED_BATCH_DELAY_SECONDS", "1.0")
    )
    EMBED_MAX_ATTEMPTS: int = int(os.getenv("EMBED_MAX_ATTEMPTS", "3"))
    EMBED_RETRY_DELAY_SECONDS: float = float(
        os.getenv("EMBED_RETRY_DELAY_SECONDS", "10.0")
    )

    # Retrieval Configuration
    RETRIEVAL_TOP_K: int = int(os.getenv("RETRIEVAL_TOP_K", "3"))

    # Vector Store Configuration
    VECTOR_BACKEND: str = os.getenv("VECTOR_BACKEND", "faiss").lower()
    VECTOR_STORE_DB_PATH: Path = Path(
        os.getenv("VECTOR_STORE_DB_PATH", "data/vector_store.db")
    )
    FAISS_INDEX_PATH: Path = Path(
        os.getenv("FAISS_INDEX_PATH", "data/faiss/news_articles.faiss")
    )
    VECTOR_COLLECTION_NAME: str = os.getenv("VECTOR_COLLECTION_NAME", "news_articles")
    VECTOR_SIZE: int = int(os.getenv("VECTOR_SIZE", "1536"))

    # Session Store Configuration
    SESSION_DB_PATH: Path = Path(os.getenv("SESSION_DB_PATH", "data/sessions.db"))
    SESSION_TTL_SECONDS: int = int(os.getenv("SESSION_TTL_SECONDS", "1800"))

    # News Feed Configuration
    NEWS_JSON_PATH: Path = Path(os.getenv("NEWS_JSON_PATH", "data/news.json"))
    GUARDIAN_API_URL: str = os.getenv(
        "GUARDIAN_API_URL", "https://content.guardianapis.com/search"
    )
    NEWS_MAX_ARTICLES: int = int(os.getenv("NEWS_MAX_ARTICLES", "50"))
    NEWS_HTTP_TIMEOUT_SECONDS: float = float(
        os.getenv("NEWS_HTTP_TIMEOUT_SECONDS", "15")
    )

    @classmethod
    def get_guardian_api_key(cls) -> str:
        """Get Guardian content API key from environment variables.

        Returns:
            Guardian API key from environment or empty string if not set.
        """
        return os.getenv("GUARDIAN_API_KEY", "")

    @classmethod
    def validate(cls) -> None:
        """Validate required configuration values.

        Raises:
            ValueError: If OPENAI_API_KEY is not set.
        """
        if not cls.get_openai_api_key():
            msg = (
                "OPENAI_API_KEY is required. Please set it in .env file or environment."
            )
            raise ValueError(msg)

    @classmethod
    def is_development(cls) -> bool:
        """Check if running in development environment.

        Returns:
            True if environment is development.
        """
        return cls.ENVIRONMENT.lower() == "development"

    @classmethod
    def setup_logging(cls) -> None:
        """Setup basic logging configuration.

        Configure logging once at application startup with console output,
        a simple format and a level taken from the environment.
        """
        logging.basicConfig(
            level=getattr(logging, cls.LOG_LEVEL, logging.INFO),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )

        third_party_level = getattr(logging, cls.OPENAI_LOG_LEVEL, logging.WARNING)
        for name in ("openai", "httpx"):
            logging.getLogger(name).setLevel(third_party_level)

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Get a logger with the specified name.

        Args:
            name: Logger name (typically __name__)

        Returns:
            Logger instance
        """
        return logging.getLogger(name)


config = Config()
