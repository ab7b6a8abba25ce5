"""
Application configuration using Pydantic Settings
"""

from pydantic_settings import BaseSettings
from typing import Dict, List, Optional, Tuple

from core.exceptions import ConfigurationError
from schemas.table import EmptyCellPolicy


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Notion API
    NOTION_TOKEN: Optional[str] = None
    NOTION_API_URL: str = "https://api.notion.com/v1"
    NOTION_VERSION: str = "2022-06-28"

    # Collections
    USERS_DATABASE_ID: Optional[str] = None
    COMPANIES_DATABASE_ID: Optional[str] = None
    EXTRA_COLLECTIONS: Dict[str, str] = {}

    # Pagination
    PAGE_SIZE: int = 100
    PAGE_DELAY_SECONDS: float = 0.5
    REQUEST_TIMEOUT: float = 30.0

    # Tabular output
    EMPTY_CELL: EmptyCellPolicy = EmptyCellPolicy.BLANK
    INCLUDE_ORIGINAL_PROPERTIES: bool = False

    # Storage
    DATA_DIR: str = "data"
    LOGS_DIR: str = "logs"

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    def collections(self) -> List[Tuple[str, str]]:
        """Ordered (name, collection id) pairs, skipping unset ids"""
        pairs = [
            ("users", self.USERS_DATABASE_ID),
            ("companies", self.COMPANIES_DATABASE_ID),
        ]
        pairs.extend(self.EXTRA_COLLECTIONS.items())
        return [(name, collection_id) for name, collection_id in pairs if collection_id]

    def check_runnable(self) -> None:
        """Fail fast when the run cannot possibly succeed"""
        if not self.NOTION_TOKEN:
            raise ConfigurationError(
                "NOTION_TOKEN is not set",
                context={"environment": self.ENVIRONMENT}
            )
        if not self.collections():
            raise ConfigurationError(
                "No collections configured",
                context={
                    "expected": ["USERS_DATABASE_ID", "COMPANIES_DATABASE_ID", "EXTRA_COLLECTIONS"]
                }
            )


settings = Settings()
