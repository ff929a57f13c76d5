from __future__ import annotations

import asyncio
import json
import logging
import os
from collections import deque
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, Set

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

from ..sim.core.config import SimulationConfig, load_config_file
from ..sim.core.world import World
from .reporting import MemoryReporter

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "HABITAT_CONFIG"


@dataclass(frozen=True)
class QueuedSnapshot:
    tick: int
    payload: str


class SimulationController:
    def __init__(
        self,
        config: SimulationConfig,
        broadcast_interval: int = 1,
        tick_seconds: float = 0.1,
        queue_limit: int = 256,
    ):
        self.config = config
        self.world = World(config)
        self.reporter = MemoryReporter()
        self.broadcast_interval = max(1, broadcast_interval)
        self.tick_seconds = tick_seconds
        self.running = False
        self.speed_multiplier = 1.0
        self.clients: Set[WebSocket] = set()
        self._client_last_sent: Dict[WebSocket, int] = {}
        # Unacknowledged snapshots beyond the limit are dropped oldest first.
        self._snapshot_queue: deque[QueuedSnapshot] = deque(maxlen=max(1, queue_limit))
        self._lock = asyncio.Lock()
        self._queue_lock = asyncio.Lock()
        self._broadcast_task: asyncio.Task | None = None
        self.world.record_initial(self.reporter)

    @property
    def tick(self) -> int:
        return self.world.tick

    async def start(self) -> None:
        if self._broadcast_task is None:
            self._broadcast_task = asyncio.create_task(self._loop())
        self.running = True

    async def stop(self) -> None:
        self.running = False

    async def reset(self) -> None:
        async with self._lock:
            self.world.reset()
            self.reporter = MemoryReporter()
            self.world.record_initial(self.reporter)
        async with self._queue_lock:
            self._snapshot_queue.clear()
        for client in self._client_last_sent:
            self._client_last_sent[client] = -1
        await self._broadcast_snapshot()

    async def advance(self) -> bool:
        """Step the world once; returns False once the configured run length is reached."""
        async with self._lock:
            if self.world.finished:
                self.running = False
                return False
            self.world.advance(self.reporter)
        if self.tick % self.broadcast_interval == 0:
            await self._broadcast_snapshot()
        return True

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.tick_seconds / self.speed_multiplier)
            if not self.running:
                continue
            if not await self.advance():
                logger.info("Run finished at tick %d", self.tick)

    async def acknowledge(self, tick: int) -> None:
        async with self._queue_lock:
            while self._snapshot_queue and self._snapshot_queue[0].tick <= tick:
                self._snapshot_queue.popleft()

    def _serialize_snapshot(self) -> QueuedSnapshot:
        snapshot = self.world.snapshot()
        payload = {
            "type": "snapshot",
            "tick": snapshot.tick,
            "payload": {
                "tick": snapshot.tick,
                "metrics": asdict(snapshot.metrics),
                "agents": snapshot.agents,
                "resources": snapshot.resources,
                "world": asdict(snapshot.world),
                "metadata": asdict(snapshot.metadata),
            },
        }
        return QueuedSnapshot(tick=snapshot.tick, payload=json.dumps(payload))

    async def _send_pending_snapshots(self, client: WebSocket) -> None:
        last_sent = self._client_last_sent.get(client, -1)
        async with self._queue_lock:
            pending = [item for item in self._snapshot_queue if item.tick > last_sent]
        for item in pending:
            await client.send_text(item.payload)
            last_sent = item.tick
        self._client_last_sent[client] = last_sent

    async def _broadcast_snapshot(self) -> None:
        queued = self._serialize_snapshot()
        async with self._queue_lock:
            self._snapshot_queue.append(queued)
        stale: Set[WebSocket] = set()
        for client in self.clients:
            try:
                await self._send_pending_snapshots(client)
            except WebSocketDisconnect:
                stale.add(client)
        for client in stale:
            self.clients.discard(client)
            self._client_last_sent.pop(client, None)


def _load_default_config() -> SimulationConfig:
    path = os.environ.get(CONFIG_ENV_VAR)
    if path:
        return load_config_file(Path(path))
    return SimulationConfig(
        grid_width=10,
        grid_height=10,
        num_random_resources=30,
        num_random_inhabitants=20,
        time_to_run=1000,
    )


app = FastAPI(title="Habitat Simulation")
controller = SimulationController(_load_default_config())


@app.on_event("startup")
async def _startup() -> None:
    await controller.start()


@app.get("/api/status")
async def status() -> JSONResponse:
    metrics = controller.world.current_metrics()
    return JSONResponse(
        {
            "running": controller.running,
            "tick": controller.tick,
            "finished": controller.world.finished,
            "population": metrics.population,
            "metrics": asdict(metrics),
            "records": [asdict(record) for record in controller.reporter.records],
        }
    )


@app.get("/api/snapshot")
async def snapshot() -> JSONResponse:
    return JSONResponse(json.loads(controller._serialize_snapshot().payload)["payload"])


@app.post("/api/control/start")
async def start_simulation() -> JSONResponse:
    controller.running = True
    return JSONResponse({"running": True})


@app.post("/api/control/stop")
async def stop_simulation() -> JSONResponse:
    controller.running = False
    return JSONResponse({"running": False})


@app.post("/api/control/reset")
async def reset_simulation() -> JSONResponse:
    await controller.reset()
    return JSONResponse({"running": controller.running, "tick": controller.tick})


@app.post("/api/control/speed")
async def set_speed(payload: dict) -> JSONResponse:
    speed = float(payload.get("multiplier", 1.0))
    controller.speed_multiplier = max(0.1, min(5.0, speed))
    return JSONResponse({"multiplier": controller.speed_multiplier})


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    await websocket.accept()
    controller.clients.add(websocket)
    controller._client_last_sent[websocket] = -1
    await controller._send_pending_snapshots(websocket)
    try:
        while True:
            message = await websocket.receive_text()
            try:
                payload = json.loads(message)
            except json.JSONDecodeError:
                continue
            if payload.get("type") == "ack":
                tick = payload.get("tick")
                if isinstance(tick, int):
                    await controller.acknowledge(tick)
    except WebSocketDisconnect:
        controller.clients.discard(websocket)
        controller._client_last_sent.pop(websocket, None)


__all__ = ["app", "controller"]
