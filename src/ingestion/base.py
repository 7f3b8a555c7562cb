"""
Base classes for Ingestion
"""
import asyncio
import re
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import httpx

from core.entities import Item

DEFAULT_USER_AGENT = "ClaudeAggregator/2.0"

_TAG_RE = re.compile(r"<[^>]+>")


def strip_html(text: Optional[str]) -> str:
    return _TAG_RE.sub("", text or "")


def truncate(text: Optional[str], length: int) -> str:
    return (text or "")[:length]


class SourceAdapter(ABC):
    """
    Base interface for all ingestion sources.
    """

    name: str

    def __init__(
        self,
        *,
        timeout: float = 8.0,
        request_delay: float = 0.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self.request_delay = request_delay
        self.transport = transport

    def client(self, headers: Optional[Dict[str, str]] = None) -> httpx.AsyncClient:
        merged = {"User-Agent": DEFAULT_USER_AGENT}
        merged.update(headers or {})
        return httpx.AsyncClient(
            timeout=self.timeout,
            headers=merged,
            transport=self.transport,
            follow_redirects=True,
        )

    async def pause(self) -> None:
        """Rate-limit gap between sub-queries against the same service."""
        if self.request_delay > 0:
            await asyncio.sleep(self.request_delay)

    @abstractmethod
    async def fetch_items(self) -> List[Item]:
        """
        Fetch and normalize the current items for this source.
        Must NEVER raise uncaught exceptions.
        """
        raise NotImplementedError
