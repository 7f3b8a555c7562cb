"""
Command line entry point: serve the aggregator or run one-off maintenance.
"""
import argparse
import asyncio
import json
import logging
import signal
import sys
from typing import Optional

from hypercorn.asyncio import serve
from hypercorn.config import Config as HypercornConfig

from services.config import Config, load_config
from services.logging import setup_logging
from services.runtime import AggregatorService
from services.store import ItemStore, StoreError
from web.app import create_app

logger = logging.getLogger(__name__)


def shutdown_trigger(event: asyncio.Event, service: AggregatorService):
    """
    Build the Hypercorn shutdown trigger.

    Timers stop and live-update connections close before Hypercorn starts
    draining, so open websockets do not hold the listener open.
    """
    async def _trigger() -> None:
        await event.wait()
        await service.shutdown()
    return _trigger


async def serve_forever(config: Config) -> int:
    service = AggregatorService(config)
    app = create_app(service, cors_origins=config.CORS_ORIGINS)

    shutdown_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, shutdown_event.set)
        except NotImplementedError:
            # Windows event loops do not support signal handlers.
            pass

    hypercorn_config = HypercornConfig()
    hypercorn_config.bind = [f"{config.HOST}:{config.PORT}"]
    hypercorn_config.accesslog = None
    hypercorn_config.graceful_timeout = config.SHUTDOWN_GRACE

    logger.info(f"Server started on http://{config.HOST}:{config.PORT}")
    service.start()

    server = asyncio.ensure_future(
        serve(app, hypercorn_config, shutdown_trigger=shutdown_trigger(shutdown_event, service))
    )
    signalled = asyncio.ensure_future(shutdown_event.wait())
    await asyncio.wait({server, signalled}, return_when=asyncio.FIRST_COMPLETED)

    if not signalled.done():
        # The listener exited on its own, e.g. the port was already bound.
        signalled.cancel()
        await service.shutdown()
        server.result()
        return 0

    try:
        await asyncio.wait_for(server, timeout=config.SHUTDOWN_GRACE)
    except asyncio.TimeoutError:
        logger.warning("Forced shutdown after timeout")
        return 1
    logger.info("HTTP server closed")
    return 0


async def refresh_once(config: Config) -> int:
    service = AggregatorService(config)
    posts = await service.refresh()
    print(f"Refreshed {len(posts)} posts")
    return 0


def _store(config: Config) -> ItemStore:
    return ItemStore(
        config.DATA_PATH,
        config.BACKUP_PATH,
        backup_retention_days=config.BACKUP_RETENTION_DAYS,
    )


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(description='Claude community aggregator')
    parser.add_argument('command', nargs='?', default='run',
                        choices=['run', 'refresh', 'backup', 'prune', 'restore', 'stats'],
                        help='Command to execute')
    parser.add_argument('file', nargs='?', help='Snapshot file for restore')
    parser.add_argument('--config', default=None,
                        help='Path to config.yml (default: resources/config.yml)')
    parser.add_argument('--days', type=int, default=None,
                        help='Retention window for prune (default: RETENTION_DAYS)')
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug logging')

    args = parser.parse_args(argv)
    config = load_config(args.config)
    setup_logging(logging.DEBUG if args.debug else logging.INFO,
                  log_path=config.LOG_PATH if args.command == 'run' else None)

    if args.command == 'run':
        return asyncio.run(serve_forever(config))

    if args.command == 'refresh':
        return asyncio.run(refresh_once(config))

    store = _store(config)

    if args.command == 'backup':
        path = store.backup()
        if path is None:
            return 1
        print(path)
    elif args.command == 'prune':
        deleted = store.prune(args.days or config.RETENTION_DAYS)
        print(f"Deleted {deleted} old posts")
    elif args.command == 'restore':
        if not args.file:
            parser.error('restore requires a snapshot file')
        try:
            restored = store.restore(args.file)
        except StoreError as e:
            logger.error(str(e))
            return 1
        print(f"Restored {restored} posts")
    elif args.command == 'stats':
        print(json.dumps(store.stats(), indent=2))

    return 0


if __name__ == '__main__':
    sys.exit(main())
