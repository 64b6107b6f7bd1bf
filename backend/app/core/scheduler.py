"""
Execução periódica de tarefas em background.

Usado pelo lifespan da aplicação para rodar a varredura de atrasos.
A tarefa recebe o evento de parada e deve checá-lo entre unidades de
trabalho; stop() espera a execução corrente terminar.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

JobFunc = Callable[[asyncio.Event], Awaitable[Any]]


class PeriodicJob:
    """Roda `func` a cada `interval_seconds` até stop()."""

    def __init__(self, name: str, func: JobFunc, interval_seconds: float):
        self.name = name
        self.func = func
        self.interval_seconds = interval_seconds
        self.runs = 0
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Agenda o loop no event loop corrente."""
        if self.is_running:
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run(), name=self.name)
        logger.info(f"Job '{self.name}' iniciado (intervalo {self.interval_seconds}s)")

    async def stop(self, timeout: float = 30.0) -> None:
        """Sinaliza a parada e aguarda; cancela a task se passar do timeout."""
        if self._task is None:
            return
        self._stop_event.set()
        try:
            await asyncio.wait_for(self._task, timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Job '{self.name}' não parou em {timeout}s; cancelando")
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        finally:
            self._task = None
        logger.info(f"Job '{self.name}' encerrado após {self.runs} execução(ões)")

    async def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                result = await self.func(self._stop_event)
                logger.info(f"Job '{self.name}' executado: {result}")
            except Exception:
                logger.exception(f"Job '{self.name}' falhou")
            self.runs += 1

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                continue
