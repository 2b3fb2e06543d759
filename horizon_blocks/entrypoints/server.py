"""Block range server entrypoint.

Serves GET /blocks from the history database and, when a Kafka REST proxy
is configured, publishes ranges on request.
"""

import asyncio
import os
import signal
import sys

import bittensor as bt
from dotenv import load_dotenv
from pydantic import ValidationError


async def serve(settings) -> None:
    from horizon_blocks.blocks.action import SendAction
    from horizon_blocks.blocks.http_server import LedgerBlocksServer
    from horizon_blocks.blocks.publisher import KafkaPublisher
    from horizon_blocks.history.database import HistoryDatabase
    from horizon_blocks.history.loader import BatchLoader
    from horizon_blocks.history.state import LedgerStateTracker

    history_db = HistoryDatabase(settings.database_url)
    core_db = HistoryDatabase(settings.core_database_url) if settings.core_database_url else None
    await history_db.ping()

    tracker = LedgerStateTracker(history_db, core_db, interval=settings.state_refresh_interval)
    await tracker.refresh()
    tracker.start()

    publisher = KafkaPublisher(settings.publish) if settings.publish else None
    action = SendAction(
        loader=BatchLoader(history_db),
        state=tracker.current,
        publisher=publisher,
        stale_threshold=settings.stale_threshold,
    )
    server = LedgerBlocksServer(
        action=action, state=tracker.current, host=settings.host, port=settings.port,
    )

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    await server.start()
    try:
        await stop_event.wait()
        bt.logging.info({"blocks_server": "shutdown_signal_received"})
    finally:
        await server.stop()
        await tracker.stop()
        if publisher is not None:
            await publisher.close()
        await history_db.dispose()
        if core_db is not None:
            await core_db.dispose()


def main() -> None:
    # Load .env if not in test mode
    if os.environ.get("HORIZON_BLOCKS_TEST_MODE") != "true":
        load_dotenv()

    from horizon_blocks.base.config import load_settings

    try:
        settings, _ = load_settings()
    except ValidationError as e:
        bt.logging.error({"blocks_config_invalid": str(e)})
        sys.exit(1)

    bt.logging.info({
        "blocks_config": {
            "host": settings.host,
            "port": settings.port,
            "stale_threshold": settings.stale_threshold,
            "publish_url": settings.publish.topic_url() if settings.publish else None,
        }
    })

    try:
        asyncio.run(serve(settings))
    except KeyboardInterrupt:
        bt.logging.info({"blocks_server": "keyboard_interrupt"})
    finally:
        bt.logging.info({"blocks_server": "stopped"})


if __name__ == "__main__":
    main()
