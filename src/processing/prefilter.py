from typing import Iterable, Optional


def keyword_match(text: str, keywords: Iterable[str]) -> bool:
    text = text.lower()
    return any(k.lower() in text for k in keywords)


def is_relevant(
    title: str,
    body: Optional[str],
    *,
    keywords: Iterable[str],
    channel: str = "",
    dedicated: Iterable[str] = (),
) -> bool:
    """
    Two-tier relevance check.

    Items from a dedicated channel (official or topic-exclusive subreddit,
    tag, ...) are always kept. Anything else must mention at least one
    keyword in its title or body.
    """
    if channel and channel.lower() in {d.lower() for d in dedicated}:
        return True

    return keyword_match(title or "", keywords) or keyword_match(body or "", keywords)
