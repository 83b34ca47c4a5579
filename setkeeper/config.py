from pydantic_settings import BaseSettings, SettingsConfigDict

# =============================================================================
# IMPORT LIMITS
# =============================================================================

# Rows per insert call during bulk checklist import
DEFAULT_IMPORT_CHUNK_SIZE = 50

# Upper bound on lines accepted from a single paste
MAX_IMPORT_LINES = 5000

# =============================================================================
# SEARCH LIMITS
# =============================================================================

# Most checklist items a cross-set player search returns
MAX_SEARCH_RESULTS = 500


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "SetKeeper"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/setkeeper"

    import_chunk_size: int = DEFAULT_IMPORT_CHUNK_SIZE


settings = Settings()
