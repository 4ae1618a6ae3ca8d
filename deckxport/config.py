from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="DECKXPORT_")

    app_name: str = "Deckxport"
    debug: bool = False

    cache_database_url: str = "sqlite+aiosqlite:///deckxport_cache.db"

    moxfield_api_base: str = "https://api2.moxfield.com"
    scryfall_api_base: str = "https://api.scryfall.com"
    tagger_graphql_url: str = "https://tagger.scryfall.com/graphql"

    # Tagger only needs these outside a same-origin proxy; sent when non-empty
    tagger_csrf_token: str = ""
    tagger_session_cookie: str = ""

    cors_origins: list[str] = ["*"]

    user_agent: str = "Deckxport/1.0"
    http_timeout: float = 30.0


settings = Settings()


# =============================================================================
# CACHE LIFETIMES
# =============================================================================

CARD_CACHE_TTL_SECONDS = 24 * 60 * 60
ORACLE_TAGS_CACHE_TTL_SECONDS = 12 * 60 * 60
BULK_METADATA_CACHE_TTL_SECONDS = 24 * 60 * 60


# =============================================================================
# UPSTREAM LIMITS
# =============================================================================

# Scryfall rejects /cards/collection requests with more identifiers than this
MAX_COLLECTION_SIZE = 75

# Scryfall asks for 50-100ms between requests
SCRYFALL_REQUEST_DELAY_SECONDS = 0.1
MOXFIELD_REQUEST_DELAY_SECONDS = 0.1
TAGGER_REQUEST_DELAY_SECONDS = 0.15

# Tag lookups stop for the rest of an import after this many failures in a row
MAX_CONSECUTIVE_TAGGER_ERRORS = 3
