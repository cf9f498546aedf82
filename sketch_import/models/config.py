# =============================================================================
# Configuration Models Module
# =============================================================================
# Provides the Pydantic Settings model for the importer:
# - ImportSettings: MongoDB connection and import defaults
# =============================================================================

import re
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["ImportSettings", "DEFAULT_DATABASE"]


DEFAULT_DATABASE = "seasketch"


class ImportSettings(BaseSettings):
    """
    Configuration for the shapefile importer.

    Maps environment variables with prefix "SKETCH_":
    - SKETCH_MONGO_URI → connection_string
    - SKETCH_MONGO_DATABASE → database
    - SKETCH_EXPECTED_EPSG → expected_epsg
    - SKETCH_LOG_LEVEL → log_level

    Attributes:
        connection_string: MongoDB connection URI (default: local server)
        database: Database name; falls back to the one embedded in the URI
        expected_epsg: EPSG code the source shapefile must declare (default: 4326)
        log_level: Logging level name (default: "INFO")
    """

    connection_string: str = Field(
        "mongodb://localhost:27017/seasketch",
        validation_alias="SKETCH_MONGO_URI",
        description="MongoDB connection URI",
    )
    database: Optional[str] = Field(
        None, validation_alias="SKETCH_MONGO_DATABASE", description="Database name"
    )
    expected_epsg: int = Field(
        4326, validation_alias="SKETCH_EXPECTED_EPSG", description="Expected source EPSG"
    )
    log_level: str = Field(
        "INFO", validation_alias="SKETCH_LOG_LEVEL", description="Logging level"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore unrelated env vars from shared .env files
    )

    @property
    def database_name(self) -> str:
        """Explicit database, else the one in the connection string."""
        if self.database:
            return self.database
        return database_from_uri(self.connection_string)


def database_from_uri(connection_string: str) -> str:
    """
    Extract the database name from a MongoDB connection string.

    Format: mongodb://[user:pass@]host[:port]/<database>[?options]

    Returns:
        Database name, or DEFAULT_DATABASE when the URI has none
    """
    host_and_path = connection_string.split("://", 1)[-1].split("@")[-1]
    match = re.search(r"/([^/?]+)(\?|$)", host_and_path)
    if match:
        return match.group(1)
    return DEFAULT_DATABASE
