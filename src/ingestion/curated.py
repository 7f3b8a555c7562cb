"""
Curated official resources, pinned at the top of every cycle
"""
from datetime import datetime, timezone
from typing import List

from core.entities import Item, Source
from ingestion.base import SourceAdapter

CURATED_RESOURCES = [
    {
        "external_id": "oc_site",
        "title": "[OpenClaw] Official Website – openclaw.ai",
        "content": "OpenClaw is a personal AI assistant platform running Claude at home. Supports Telegram, WhatsApp, Discord and more. Skill system, marathon mode, local extensions.",
        "author": "openclaw",
        "origin_label": "OpenClaw",
        "score": 9999,
        "url": "https://openclaw.ai",
        "source": Source.OPENCLAW,
    },
    {
        "external_id": "oc_docs",
        "title": "[OpenClaw] Documentation & Guides",
        "content": "Complete OpenClaw docs: setup, skills, configuration, marathon mode, Android control, Telegram integration, and more.",
        "author": "openclaw",
        "origin_label": "OpenClaw",
        "score": 9998,
        "url": "https://docs.openclaw.ai",
        "source": Source.OPENCLAW,
    },
    {
        "external_id": "oc_clawhub",
        "title": "[ClawHub] OpenClaw Skills Marketplace",
        "content": "ClawHub is the skills/plugin marketplace for OpenClaw. Find hundreds of skills: academic research, code debugging, stock prices, and more.",
        "author": "openclaw",
        "origin_label": "ClawHub",
        "score": 9997,
        "url": "https://clawhub.ai",
        "source": Source.OPENCLAW,
    },
    {
        "external_id": "oc_discord",
        "title": "[OpenClaw] Community Discord Server",
        "content": "Join the OpenClaw community Discord to get help, share skills, discuss features, and connect with other users.",
        "author": "openclaw",
        "origin_label": "OpenClaw",
        "score": 9996,
        "url": "https://discord.com/invite/clawd",
        "source": Source.OPENCLAW,
    },
    {
        "external_id": "moltbot_site",
        "title": "[MoltBot] Official MoltBook – AI Discord Bot",
        "content": "MoltBot is an AI-powered Discord bot built on Claude. Create, customize, and deploy Claude-based bots in your Discord server.",
        "author": "moltbot",
        "origin_label": "MoltBot",
        "score": 9995,
        "url": "https://moltbook.com",
        "source": Source.MOLTBOT,
    },
    {
        "external_id": "clawd_site",
        "title": "[ClawdBot] Claude-powered Telegram & WhatsApp Bot",
        "content": "ClawdBot is the Telegram/WhatsApp interface for OpenClaw. Run Claude AI directly in messaging apps with full skill support and real-time notifications.",
        "author": "openclaw",
        "origin_label": "ClawdBot",
        "score": 9994,
        "url": "https://openclaw.ai",
        "source": Source.CLAWDBOT,
    },
    {
        "external_id": "cc_docs",
        "title": "[Claude Code] Official Claude Code Documentation",
        "content": "Claude Code is Anthropic's official CLI for Claude. Docs: installation, CLAUDE.md optimisation, tool use, memory management, best practices for AI-assisted development.",
        "author": "anthropic",
        "origin_label": "ClaudeCode",
        "score": 9993,
        "url": "https://docs.anthropic.com/en/docs/claude-code",
        "source": Source.ANTHROPIC,
    },
    {
        "external_id": "api_docs",
        "title": "[Anthropic] Claude API Documentation",
        "content": "Official Anthropic API: all Claude models, messages API, tool use, vision, streaming, system prompts, rate limits, Python and TypeScript SDKs.",
        "author": "anthropic",
        "origin_label": "AnthropicBlog",
        "score": 9992,
        "url": "https://docs.anthropic.com",
        "source": Source.ANTHROPIC,
    },
]


class CuratedAdapter(SourceAdapter):
    name = "curated"

    async def fetch_items(self) -> List[Item]:
        now = datetime.now(timezone.utc)
        return [Item(created_at=now, reply_count=0, **entry) for entry in CURATED_RESOURCES]
