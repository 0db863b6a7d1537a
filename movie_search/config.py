from pathlib import Path

from pydantic import AnyUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables or .env."""

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parent.parent / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # MongoDB connection
    mongodb_uri: AnyUrl = Field(..., validation_alias="MONGODB_URI")
    db_name: str = Field("sample_mflix", validation_alias="DB_NAME")
    collection_name: str = Field("movies", validation_alias="COLLECTION_NAME")
    mongo_server_selection_timeout_ms: int = Field(5000, validation_alias="MONGO_SERVER_SELECTION_TIMEOUT_MS")

    # Atlas Search indexes
    search_index_name: str = Field("movies", validation_alias="SEARCH_INDEX_NAME")
    title_weight_index_name: str = Field("movies_title_weight", validation_alias="TITLE_WEIGHT_INDEX_NAME")
    autocomplete_index_name: str = Field("movies_autocomplete", validation_alias="AUTOCOMPLETE_INDEX_NAME")

    # Search tuning
    default_page_size: int = Field(30, validation_alias="DEFAULT_PAGE_SIZE")
    default_title_weight: float = Field(3.0, validation_alias="DEFAULT_TITLE_WEIGHT")
    autocomplete_candidates: int = Field(30, validation_alias="AUTOCOMPLETE_CANDIDATES")
    autocomplete_limit: int = Field(10, validation_alias="AUTOCOMPLETE_LIMIT")

    # HTTP
    environment: str = Field("production", validation_alias="ENVIRONMENT")
    cors_origin: str = Field("http://localhost:5173", validation_alias="CORS_ORIGIN")

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


settings = Settings()
