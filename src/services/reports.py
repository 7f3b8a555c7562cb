"""
Daily report files
"""
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import aiofiles

logger = logging.getLogger(__name__)


async def write_daily_report(
    log_path: str,
    stats: Dict[str, Any],
    connected_clients: int,
    uptime: float,
    now: Optional[datetime] = None,
) -> Path:
    """Write daily-report-<date>.json into log_path and return its path."""
    now = now or datetime.now(timezone.utc)
    date = now.date().isoformat()

    report = {
        "date": date,
        "generatedAt": now.isoformat(),
        "stats": stats,
        "connectedClients": connected_clients,
        "uptime": uptime,
    }

    output_dir = Path(log_path)
    output_dir.mkdir(parents=True, exist_ok=True)
    report_file = output_dir / f"daily-report-{date}.json"

    async with aiofiles.open(report_file, "w", encoding="utf-8") as f:
        await f.write(json.dumps(report, indent=2))

    logger.info("Daily report generated", extra={"data": {"file": str(report_file)}})
    return report_file
