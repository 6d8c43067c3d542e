# receiver/api.py
from pathlib import Path
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, JSONResponse, RedirectResponse, StreamingResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from orders.broadcaster import Broadcaster
from orders.config import ReceiverSettings
from orders.errors import OrderError, InvalidPayload
from orders.services.ingestion_service import IngestionService
from orders.services.status_service import StatusService
from orders.services.stream_service import StreamSession
from orders.stores.order_store import OrderStore
from utils.logger import logger
from utils.time import Clock

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def build_app(store: OrderStore,
              broadcaster: Broadcaster,
              settings: Optional[ReceiverSettings] = None,
              clock: Optional[Clock] = None) -> FastAPI:
    settings = settings or ReceiverSettings()
    ingestion = IngestionService(store, broadcaster, clock)
    status_svc = StatusService(store, broadcaster)

    app = FastAPI(title="Order Webhook Receiver")

    class StatusPatch(BaseModel):
        # status stays untyped so a bad value surfaces as InvalidStatus, not a schema error
        status: Any = None
        confirm_minutes: Optional[int] = None
        confirmed_at: Optional[str] = None

    @app.exception_handler(OrderError)
    async def order_error(request: Request, exc: OrderError):
        logger.debug(f"{request.method} {request.url.path} -> {exc.status_code} {exc}")
        return JSONResponse({"error": str(exc)}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def body_error(request: Request, exc: RequestValidationError):
        errs = "; ".join(f"{'.'.join(str(p) for p in e.get('loc', ()))}: {e.get('msg')}" for e in exc.errors())
        return JSONResponse({"error": f"Invalid request body ({errs})"}, status_code=400)

    # ---- webhook ----
    @app.post("/webhook/orders")
    async def receive_order(request: Request):
        try:
            payload = await request.json()
        except ValueError:
            raise InvalidPayload(reason="body is not valid JSON") from None
        return ingestion.ingest(payload)

    # ---- admin ----
    @app.get("/admin/stream")
    async def admin_stream():
        session = StreamSession(broadcaster, heartbeat_s=settings.heartbeat_s,
                                queue_max=settings.queue_max)
        session.open()

        async def event_source():
            try:
                async for frame in session.frames():
                    yield frame
            finally:
                session.close()

        return StreamingResponse(event_source(),
                                 media_type="text/event-stream",
                                 headers=SSE_HEADERS)

    @app.get("/admin/orders")
    async def list_orders():
        orders = [o.to_dict() for o in store.list_all()]
        return {"success": True, "count": len(orders), "orders": orders}

    @app.patch("/admin/orders/{order_id}/status")
    async def patch_status(order_id: str, req: StatusPatch):
        order = status_svc.update(order_id, req.status,
                                  confirm_minutes=req.confirm_minutes,
                                  confirmed_at=req.confirmed_at)
        return {"success": True, "order": order.to_dict()}

    @app.get("/health")
    async def health():
        return {"status": "ok", "orders": store.count, "clients": broadcaster.count}

    # ---- dashboard / static ----
    static_dir = Path(settings.static_dir)

    @app.get("/")
    async def root():
        return RedirectResponse("/admin", status_code=302)

    @app.get("/admin")
    async def dashboard():
        page = static_dir / settings.dashboard_file
        if not page.is_file():
            return JSONResponse({"error": "Dashboard not found"}, status_code=404)
        return FileResponse(page, media_type="text/html")

    # mounted last so API routes win
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir), name="static")
    else:
        logger.warning(f"Static dir {static_dir} not found; dashboard assets disabled")

    return app
