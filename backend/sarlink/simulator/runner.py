from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Callable, Coroutine

from sarlink.config import settings
from sarlink.services.fleet_store import fleet_store
from sarlink.services.log_store import log_store
from sarlink.simulator.kinematics import KinematicSimulator

logger = logging.getLogger(__name__)

TickCallback = Callable[[int], Coroutine[Any, Any, None]]


class SimulationRunner:
    """Drives a KinematicSimulator from its own asyncio task at a fixed rate."""

    def __init__(self, simulator: KinematicSimulator, tick_hz: float = 10.0) -> None:
        if tick_hz <= 0:
            raise ValueError("tick_hz must be positive")
        self.simulator = simulator
        self.interval = 1.0 / tick_hz
        self._callbacks: list[TickCallback] = []
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def on_tick(self, callback: TickCallback) -> None:
        self._callbacks.append(callback)

    async def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())
        logger.info("Simulation started at %.1f Hz", 1.0 / self.interval)

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Simulation stopped after %d ticks", self.simulator.tick_count)

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        next_at = loop.time()
        while True:
            try:
                self.simulator.tick()
                for callback in self._callbacks:
                    await callback(self.simulator.tick_count)
            except Exception:
                logger.exception("Error in simulation tick %d", self.simulator.tick_count)
            next_at += self.interval
            delay = next_at - loop.time()
            if delay < 0:
                # Fell behind; drop the backlog instead of bursting ticks
                next_at = loop.time()
                delay = 0
            await asyncio.sleep(delay)


simulator = KinematicSimulator(fleet_store, log_store, random.Random(settings.sim_seed))
simulation_runner = SimulationRunner(simulator, tick_hz=settings.sim_tick_hz)
