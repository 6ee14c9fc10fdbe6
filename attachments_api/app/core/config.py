"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from environment
variables.  Defaults are provided for all fields so the services can be
started locally without any configuration at all.
"""

import os
from dataclasses import dataclass
from typing import Set


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Resource Attachments API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    # Path to the SQLite file backing the bucket store.  Relative paths
    # are resolved against the project root by ``db.get_database_path``.
    database_url: str = os.getenv("DATABASE_URL", "attachments.db")

    # Seconds SQLite waits for a lock held by another connection before
    # giving up with "database is locked".
    db_timeout: float = float(os.getenv("DB_TIMEOUT", "5"))

    # Comma‑separated resource types provisioned as top‑level buckets when
    # a service starts.  Requests for any other type are rejected.
    resource_types: str = os.getenv("RESOURCE_TYPES", "authors,books")

    host: str = os.getenv("HOST", "0.0.0.0")
    ratings_port: int = int(os.getenv("RATINGS_PORT", "8001"))
    comments_port: int = int(os.getenv("COMMENTS_PORT", "8002"))

    # Seconds uvicorn waits for in‑flight requests on shutdown.
    shutdown_timeout: int = int(os.getenv("SHUTDOWN_TIMEOUT", "15"))

    def resource_type_names(self) -> Set[str]:
        """Return the configured resource types as a set of names."""
        return {name.strip() for name in self.resource_types.split(",") if name.strip()}


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables must
# be set before importing this module.
settings = Settings()
