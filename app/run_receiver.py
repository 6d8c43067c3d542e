# app/run_receiver.py
import asyncio, signal, os, argparse
import contextlib
from pathlib import Path

import uvicorn

from utils.config import load_cfg
from utils.logger import logger
from orders.config import make_settings_from_cfg
from orders.broadcaster import Broadcaster
from orders.stores.order_store import OrderStore
from receiver.api import build_app

BASE_DIR = Path(__file__).resolve().parents[1]


def env_default(name: str, default=None):
    return os.getenv(name, default)


def build_parser():
    p = argparse.ArgumentParser("order-receiver")
    p.add_argument("--host", default=env_default("RECEIVER_HOST", None))
    p.add_argument("--port", type=int, default=int(env_default("PORT", "0") or 0))
    p.add_argument("--static-dir", default=env_default("RECEIVER_STATIC_DIR", None))
    p.add_argument("--config-path", default=env_default("RECEIVER_CONFIG", None))
    return p


async def main():
    args = build_parser().parse_args()

    cfg = load_cfg(args.config_path)
    settings = make_settings_from_cfg(cfg)
    if args.host:
        settings.host = args.host
    if args.port:
        settings.port = args.port
    if args.static_dir:
        settings.static_dir = args.static_dir
    if not Path(settings.static_dir).is_absolute():
        settings.static_dir = str(BASE_DIR / settings.static_dir)

    store = OrderStore()
    broadcaster = Broadcaster(queue_max=settings.queue_max)
    app = build_app(store, broadcaster, settings)

    server = uvicorn.Server(
        uvicorn.Config(app, host=settings.host,
                            port=settings.port,
                            loop="asyncio",
                            lifespan="off",
                            timeout_keep_alive=10,
                            log_config=None,
                            access_log=False)
    )

    http_task = asyncio.create_task(server.serve(), name="http")
    stop_event = asyncio.Event()

    def _graceful(*_):
        stop_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _graceful)
        except NotImplementedError:
            pass  # Windows

    shown = "localhost" if settings.host in ("0.0.0.0", "::") else settings.host
    logger.info(f"Webhook Receiver running on http://{shown}:{settings.port}")
    logger.info(f"   Webhook URL : http://{shown}:{settings.port}/webhook/orders")
    logger.info(f"   Admin Panel : http://{shown}:{settings.port}/admin")

    stop_waiter = asyncio.create_task(stop_event.wait())
    await asyncio.wait({http_task, stop_waiter}, return_when=asyncio.FIRST_COMPLETED)

    # end open SSE streams first so uvicorn is not left waiting on them
    broadcaster.close_all()
    server.should_exit = True
    stop_waiter.cancel()
    with contextlib.suppress(asyncio.CancelledError, asyncio.TimeoutError):
        await asyncio.wait_for(http_task, timeout=5)
    logger.info("Webhook Receiver stopped")


if __name__ == "__main__":
    asyncio.run(main())
