"""
Loads and handles config from config.yml
API credentials (REDDIT_CLIENT_ID, REDDIT_CLIENT_SECRET, GITHUB_TOKEN) are loaded from .env
"""
import logging
import os
from typing import List, Dict, Any, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel

logger = logging.getLogger(__name__)

SOURCE_TYPES = ("curated", "anthropic_blog", "hackernews", "github", "devto", "reddit")


class SourceConfig(BaseModel):
    """Configuration for a single ingestion source."""
    type: str  # one of SOURCE_TYPES
    enabled: bool = True
    subreddits: Optional[List[str]] = None  # For reddit
    queries: Optional[List[str]] = None  # For hackernews, github
    tags: Optional[List[str]] = None  # For devto
    feeds: Optional[List[str]] = None  # For anthropic_blog


class IngestionConfig(BaseModel):
    """Sources plus the relevance filter settings shared between them."""
    sources: List[SourceConfig] = []
    keywords: List[str] = []
    dedicated: List[str] = []


class Config(BaseModel):
    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    CORS_ORIGINS: List[str] = []

    # Polling
    POLL_INTERVAL: float = 300.0
    REQUEST_TIMEOUT: float = 8.0
    SHUTDOWN_GRACE: float = 10.0
    RETENTION_DAYS: int = 30
    BACKUP_RETENTION_DAYS: int = 30

    # Storage
    DATA_PATH: str = "data/posts.json"
    BACKUP_PATH: str = "backups"
    LOG_PATH: str = "logs"

    # Credentials
    REDDIT_CLIENT_ID: Optional[str] = None
    REDDIT_CLIENT_SECRET: Optional[str] = None
    REDDIT_USER_AGENT: str = "ClaudeRedditAggregator/1.0.0"
    GITHUB_TOKEN: Optional[str] = None

    ingestion: IngestionConfig = IngestionConfig()


def _get_config_path() -> str:
    """Get the path to config.yml, handling different working directories."""
    # Try relative path first
    if os.path.exists('resources/config.yml'):
        return 'resources/config.yml'

    # Try from project root
    project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
    config_path = os.path.join(project_root, 'resources', 'config.yml')
    if os.path.exists(config_path):
        return config_path

    raise FileNotFoundError("Cannot find resources/config.yml")


def _parse_ingestion_config(data: Dict[str, Any]) -> IngestionConfig:
    """Parse ingestion configuration from YAML data."""
    sources = []
    for src in data.get("sources", []):
        source_type = str(src.get("type", "")).lower()
        if source_type not in SOURCE_TYPES:
            logger.error(f"Ignoring unknown source type: {source_type!r}")
            continue
        sources.append(SourceConfig(
            type=source_type,
            enabled=src.get("enabled", True),
            subreddits=src.get("subreddits"),
            queries=src.get("queries"),
            tags=src.get("tags"),
            feeds=src.get("feeds"),
        ))

    return IngestionConfig(
        sources=sources,
        keywords=data.get("keywords", []),
        dedicated=data.get("dedicated", []),
    )


def _env_or(config: Dict[str, Any], key: str, default: Any) -> Any:
    """Environment variables win over config.yml."""
    value = os.getenv(key)
    if value not in (None, ""):
        return value
    return config.get(key, default)


def load_config(path: Optional[str] = None) -> Config:
    """Load configuration from config.yml and credentials from .env."""
    # Load .env for sensitive credentials
    load_dotenv()

    config_path = path or _get_config_path()

    with open(config_path, 'r') as file:
        config = yaml.safe_load(file) or {}

    return Config(
        HOST=_env_or(config, "HOST", "0.0.0.0"),
        PORT=int(_env_or(config, "PORT", 3000)),
        CORS_ORIGINS=config.get("CORS_ORIGINS", []),

        POLL_INTERVAL=float(_env_or(config, "POLL_INTERVAL", 300)),
        REQUEST_TIMEOUT=float(config.get("REQUEST_TIMEOUT", 8)),
        SHUTDOWN_GRACE=float(config.get("SHUTDOWN_GRACE", 10)),
        RETENTION_DAYS=int(config.get("RETENTION_DAYS", 30)),
        BACKUP_RETENTION_DAYS=int(config.get("BACKUP_RETENTION_DAYS", 30)),

        DATA_PATH=_env_or(config, "DATA_PATH", "data/posts.json"),
        BACKUP_PATH=_env_or(config, "BACKUP_PATH", "backups"),
        LOG_PATH=_env_or(config, "LOG_PATH", "logs"),

        REDDIT_CLIENT_ID=os.getenv("REDDIT_CLIENT_ID"),
        REDDIT_CLIENT_SECRET=os.getenv("REDDIT_CLIENT_SECRET"),
        REDDIT_USER_AGENT=os.getenv("REDDIT_USER_AGENT") or "ClaudeRedditAggregator/1.0.0",
        GITHUB_TOKEN=os.getenv("GITHUB_TOKEN"),

        ingestion=_parse_ingestion_config(config.get("ingestion", {})),
    )


def get_enabled_sources(ingestion_config: IngestionConfig) -> List[SourceConfig]:
    """Get only enabled sources from an ingestion config."""
    return [src for src in ingestion_config.sources if src.enabled]
