from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from dataclasses import asdict
from typing import Dict, Optional, Set

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from scheduler import InvalidCallError, InvariantViolation, SchedulerError
from simulation import BankConfig, Building, Simulation

logger = logging.getLogger(__name__)


class SelectorChoice(BaseModel):
    name: str
    options: Dict[str, object] = {}


class CallRequest(BaseModel):
    floor: int
    direction: Optional[int] = None


class SimulationManager:
    def __init__(
        self,
        num_floors: int = 10,
        num_cars: int = 3,
        tick_interval: float = 0.5,
        arrival_rate_per_floor: float = 0.0,
    ) -> None:
        building = Building(BankConfig(num_floors=num_floors, num_cars=num_cars))
        self.simulation = Simulation(
            building=building,
            arrival_rate_per_floor=arrival_rate_per_floor,
            metrics_hook_interval=1,
        )
        self.tick_interval = tick_interval
        self.clients: Set[WebSocket] = set()
        self._task: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()

    async def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    async def _run(self) -> None:
        while True:
            async with self._lock:
                try:
                    self.simulation.step()
                except SchedulerError:
                    logger.exception("Simulation step aborted at t=%s", self.simulation.current_time)
                payload = self.current_state()
            await self.broadcast(payload)
            await asyncio.sleep(self.tick_interval)

    async def broadcast(self, payload: dict) -> None:
        message = json.dumps(payload)
        disconnected: Set[WebSocket] = set()
        for client in set(self.clients):
            try:
                await client.send_text(message)
            except WebSocketDisconnect:
                disconnected.add(client)
        for client in disconnected:
            await self.unregister(client)

    async def register(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self.clients.add(websocket)
        await websocket.send_text(json.dumps(self.current_state()))

    async def unregister(self, websocket: WebSocket) -> None:
        if websocket in self.clients:
            self.clients.remove(websocket)
        with contextlib.suppress(Exception):
            await websocket.close()

    def current_state(self) -> dict:
        metrics = asdict(self.simulation.metrics.snapshot(self.simulation.current_time))
        return {
            "time": self.simulation.current_time,
            "building": self.simulation.building.snapshot(),
            "metrics": metrics,
            "selector": self.simulation.building.selector_name,
        }

    async def set_selector(self, name: str, options: Dict[str, object]) -> dict:
        async with self._lock:
            self.simulation.building.set_selector(name, **options)
            return self.current_state()

    async def request_call(self, floor: int, direction: Optional[int]) -> dict:
        async with self._lock:
            car_id = self.simulation.request_call(floor, direction)
            state = self.current_state()
            state["floor"] = floor
            state["car_id"] = car_id
            return state


manager = SimulationManager()
app = FastAPI(title="LiftBank Simulation API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def on_startup() -> None:
    await manager.start()


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await manager.stop()


@app.get("/state")
async def get_state() -> dict:
    return manager.current_state()


@app.post("/calls")
async def request_call(request: CallRequest) -> dict:
    try:
        return await manager.request_call(request.floor, request.direction)
    except InvalidCallError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except InvariantViolation as exc:
        raise HTTPException(status_code=503, detail=str(exc))


@app.post("/selector")
async def set_selector(choice: SelectorChoice) -> dict:
    try:
        return await manager.set_selector(choice.name, choice.options)
    except (TypeError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@app.websocket("/ws/stream")
async def websocket_endpoint(websocket: WebSocket) -> None:
    await manager.register(websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await manager.unregister(websocket)


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    uvicorn.run("server.app:app", host="0.0.0.0", port=8000, reload=False)
