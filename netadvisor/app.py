from __future__ import annotations

import asyncio
import json
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .health import NmcliPathWatcher, PathHealthMonitor
from .log import get_logger
from .models import ViewState
from .notifications import LogNotificationSink
from .orchestrator import ScanOrchestrator
from .wifi_scanner import default_scan_source

logger = get_logger(__name__)


def build_orchestrator() -> tuple[ScanOrchestrator, NmcliPathWatcher]:
    monitor = PathHealthMonitor()
    orchestrator = ScanOrchestrator(default_scan_source(), monitor, LogNotificationSink())
    watcher = NmcliPathWatcher(monitor, orchestrator.config)
    return orchestrator, watcher


def create_app(
    orchestrator: ScanOrchestrator | None = None,
    watcher: NmcliPathWatcher | None = None,
) -> FastAPI:
    """Build the view surface around one orchestrator.

    The scan loop and path watcher run for the lifetime of the app.
    """
    if orchestrator is None:
        orchestrator, watcher = build_orchestrator()

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        if watcher is not None:
            await watcher.poll_once()
            watcher.start()
        orchestrator.start()
        try:
            yield
        finally:
            await orchestrator.stop()
            if watcher is not None:
                await watcher.stop()

    app = FastAPI(title="NetAdvisor", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.orchestrator = orchestrator

    @app.get("/health")
    async def health() -> dict:
        snapshot = orchestrator.health.snapshot()
        return {
            "ok": True,
            "path_satisfied": snapshot.satisfied,
            "internet_reachable": snapshot.internet_reachable,
        }

    @app.get("/api/state")
    async def get_state() -> dict:
        return orchestrator.state.to_payload()

    @app.post("/api/scan")
    async def scan_now() -> JSONResponse:
        started = await orchestrator.scan_now()
        if not started:
            return JSONResponse(
                status_code=409,
                content={"detail": "scan already in progress", "state": orchestrator.state.to_payload()},
            )
        return JSONResponse(status_code=200, content=orchestrator.state.to_payload())

    @app.websocket("/ws")
    async def ws_state(ws: WebSocket) -> None:
        await ws.accept()
        queue: asyncio.Queue[ViewState] = asyncio.Queue(maxsize=16)

        def _enqueue(state: ViewState) -> None:
            if queue.full():
                queue.get_nowait()
            queue.put_nowait(state)

        orchestrator.add_listener(_enqueue)
        pending: set[asyncio.Task] = set()
        try:
            await ws.send_text(json.dumps({"type": "state", **orchestrator.state.to_payload()}))
            while True:
                # Non-blocking receive for control messages
                try:
                    msg = await asyncio.wait_for(ws.receive_text(), timeout=0.05)
                    payload = json.loads(msg)
                    if not isinstance(payload, dict):
                        logger.debug("Ignoring non-object websocket message")
                    elif payload.get("type") == "scan":
                        task = asyncio.create_task(orchestrator.scan_now())
                        pending.add(task)
                        task.add_done_callback(pending.discard)
                except asyncio.TimeoutError:
                    pass
                except json.JSONDecodeError:
                    logger.debug("Ignoring malformed websocket message")

                while not queue.empty():
                    state = queue.get_nowait()
                    await ws.send_text(json.dumps({"type": "state", **state.to_payload()}))
        except WebSocketDisconnect:
            pass
        finally:
            orchestrator.remove_listener(_enqueue)
            for task in pending:
                task.cancel()

    return app
