import logging
from typing import Iterable, List

from core.entities import Item

logger = logging.getLogger(__name__)


def dedupe_by_external_id(items: Iterable[Item]) -> List[Item]:
    """
    Returns items with unique external_id, keeping the first occurrence
    """
    seen = set()
    unique: List[Item] = []

    for item in items:
        if item.external_id in seen:
            logger.debug(f"Skipping batch duplicate: {item.external_id}")
            continue
        seen.add(item.external_id)
        unique.append(item)

    return unique
