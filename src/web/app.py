"""
Quart application serving the aggregator API and the live-update websocket.
"""
import asyncio
import json
import logging
import time
from datetime import datetime, timezone
from typing import Optional

from quart import Quart, copy_current_websocket_context, g, jsonify, request, websocket
from quart_cors import cors, cors_exempt

from core.schemas import MAX_PAGE_SIZE, PostQuery
from ingestion.source_factory import SOURCE_METADATA
from services.notifier import CLOSE, STATS
from services.runtime import AggregatorService

logger = logging.getLogger(__name__)

REQUEST_REFRESH = "request-refresh"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _int_arg(name: str, default: int) -> int:
    """Read an integer query parameter, falling back to the default."""
    value = request.args.get(name)
    if value in (None, ""):
        return default
    try:
        return int(value)
    except ValueError:
        return default


def create_app(service: AggregatorService, cors_origins: Optional[list] = None) -> Quart:
    """Create the Quart app bound to one AggregatorService."""
    app = Quart(__name__)
    app = cors(app, allow_origin=cors_origins or "*", allow_methods=["GET", "POST"])

    # ==================== Request logging ====================

    @app.before_request
    async def start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    async def log_request(response):
        started = getattr(g, "request_started", None)
        duration = (time.perf_counter() - started) * 1000 if started else 0.0
        logger.info(
            f"{request.method} {request.path}",
            extra={"data": {"status": response.status_code, "duration": f"{duration:.0f}ms"}},
        )
        return response

    # ==================== API Routes ====================

    @app.route("/api/posts")
    async def list_posts():
        try:
            options = PostQuery(
                search=request.args.get("search", ""),
                subreddit=request.args.get("subreddit", ""),
                sort_by=request.args.get("sortBy", "created_at"),
                sort_order=request.args.get("sortOrder", "desc"),
                page=_int_arg("page", 1),
                limit=min(_int_arg("limit", 20), MAX_PAGE_SIZE),
                min_upvotes=_int_arg("minUpvotes", 0),
                days_back=service.config.RETENTION_DAYS,
            )
            result = service.store.query(options)
            return jsonify({
                "success": True,
                **result.to_dict(),
                "lastUpdated": _now_iso(),
            })
        except Exception as e:
            logger.error("Error fetching posts", extra={"data": {"error": str(e)}})
            return jsonify({
                "success": False,
                "error": "Failed to fetch posts",
                "message": str(e),
            }), 500

    @app.route("/api/stats")
    async def get_stats():
        try:
            return jsonify({"success": True, "stats": service.store.stats()})
        except Exception as e:
            logger.error("Error fetching stats", extra={"data": {"error": str(e)}})
            return jsonify({"success": False, "error": "Failed to fetch stats"}), 500

    @app.route("/api/refresh", methods=["POST"])
    async def refresh():
        try:
            logger.info("Manual refresh triggered")
            posts = await service.refresh()
            return jsonify({"success": True, "message": f"Refreshed {len(posts)} posts"})
        except Exception as e:
            logger.error("Error during manual refresh", extra={"data": {"error": str(e)}})
            return jsonify({"success": False, "error": "Failed to refresh posts"}), 500

    @app.route("/api/sources")
    async def list_sources():
        return jsonify({"sources": SOURCE_METADATA})

    @app.route("/api/health")
    async def health():
        return jsonify({
            "status": "healthy",
            "uptime": service.uptime(),
            "timestamp": _now_iso(),
        })

    # ==================== Live updates ====================

    async def _forward(queue: asyncio.Queue) -> None:
        while True:
            message = await queue.get()
            if message is CLOSE:
                return
            await websocket.send(json.dumps(message))

    async def _listen() -> None:
        while True:
            raw = await websocket.receive()
            try:
                message = json.loads(raw)
            except (TypeError, ValueError):
                continue
            if isinstance(message, dict) and message.get("event") == REQUEST_REFRESH:
                logger.info("Client requested refresh")
                try:
                    await service.refresh()
                except Exception as e:
                    logger.error("Client refresh failed", extra={"data": {"error": str(e)}})

    # CORS_ORIGINS governs the HTTP API; the websocket accepts any origin,
    # including clients that send no Origin header.
    @app.websocket("/ws")
    @cors_exempt
    async def live_updates():
        queue = service.broadcaster.subscribe()
        sender = receiver = None
        try:
            await websocket.send(json.dumps({"event": STATS, "data": service.store.stats()}))
            sender = asyncio.ensure_future(copy_current_websocket_context(_forward)(queue))
            receiver = asyncio.ensure_future(copy_current_websocket_context(_listen)())
            await asyncio.wait({sender, receiver}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (sender, receiver):
                if task is not None:
                    task.cancel()
            await asyncio.gather(
                *(task for task in (sender, receiver) if task is not None),
                return_exceptions=True,
            )
            service.broadcaster.unsubscribe(queue)

    return app
