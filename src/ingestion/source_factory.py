"""
Source Factory - Creates ingestion adapters from configuration.
"""
import logging
from typing import List

from ingestion.base import SourceAdapter
from ingestion.curated import CuratedAdapter
from ingestion.devto import DevToAdapter
from ingestion.github import GitHubAdapter
from ingestion.hackernews import HackerNewsAdapter
from ingestion.reddit import RedditAdapter, RedditAuth
from ingestion.rss import AnthropicBlogAdapter
from services.config import Config, SourceConfig, get_enabled_sources

logger = logging.getLogger(__name__)

SOURCE_METADATA = [
    {"id": "reddit", "name": "Reddit", "icon": "🔴", "description": "ClaudeAI, claude, claudedev, AnthropicAI, ClaudeCode and more"},
    {"id": "hackernews", "name": "Hacker News", "icon": "🟠", "description": "Top HN stories about Claude, OpenClaw, MoltBot, ClawdBot"},
    {"id": "github", "name": "GitHub", "icon": "⚫", "description": "Repos for openclaw, clawdbot, moltbot, claude-code"},
    {"id": "devto", "name": "Dev.to", "icon": "🟣", "description": "Articles tagged claude, anthropic, aitools"},
    {"id": "anthropic", "name": "Anthropic Blog", "icon": "🔵", "description": "Official Anthropic news and releases"},
    {"id": "openclaw", "name": "OpenClaw", "icon": "🦅", "description": "Official OpenClaw & ClawHub resources"},
    {"id": "moltbot", "name": "MoltBot", "icon": "🤖", "description": "Official MoltBook resources"},
    {"id": "clawdbot", "name": "ClawdBot", "icon": "📱", "description": "Official ClawdBot resources"},
]


def create_source_adapter(source_config: SourceConfig, config: Config) -> SourceAdapter:
    """
    Create a source adapter from configuration.

    Args:
        source_config: Configuration for the source
        config: Application config (credentials, timeouts, filter settings)

    Returns:
        Configured SourceAdapter instance

    Raises:
        ValueError: If source type is unknown
    """
    source_type = source_config.type.lower()
    timeout = config.REQUEST_TIMEOUT
    keywords = config.ingestion.keywords
    dedicated = config.ingestion.dedicated

    if source_type == "curated":
        return CuratedAdapter()

    elif source_type == "anthropic_blog":
        return AnthropicBlogAdapter(feed_urls=source_config.feeds, timeout=timeout)

    elif source_type == "hackernews":
        return HackerNewsAdapter(queries=source_config.queries, timeout=timeout)

    elif source_type == "github":
        return GitHubAdapter(
            queries=source_config.queries,
            token=config.GITHUB_TOKEN,
            timeout=timeout,
        )

    elif source_type == "devto":
        return DevToAdapter(
            tags=source_config.tags,
            keywords=keywords,
            dedicated=dedicated,
            timeout=timeout,
        )

    elif source_type == "reddit":
        auth = RedditAuth(
            config.REDDIT_CLIENT_ID,
            config.REDDIT_CLIENT_SECRET,
            user_agent=config.REDDIT_USER_AGENT,
        )
        return RedditAdapter(
            subreddits=source_config.subreddits,
            keywords=keywords,
            dedicated=dedicated,
            auth=auth,
            user_agent=config.REDDIT_USER_AGENT,
            retention_days=config.RETENTION_DAYS,
            timeout=max(timeout, 10.0),
        )

    else:
        raise ValueError(f"Unknown source type: {source_type}")


def create_adapters_from_config(config: Config) -> List[SourceAdapter]:
    """
    Create all enabled source adapters, in configured priority order.
    """
    adapters = []

    for source_config in get_enabled_sources(config.ingestion):
        try:
            adapter = create_source_adapter(source_config, config)
            adapters.append(adapter)
            logger.info(f"Created {source_config.type} adapter")
        except ValueError as e:
            logger.error(f"Failed to create adapter for {source_config.type}: {e}")

    return adapters
