"""Workers run as asyncio tasks, supervised together, and the app entry."""

from __future__ import annotations

import asyncio
import logging
import threading
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor

from arbwatch.common.config import Config
from arbwatch.common.context import Context
from arbwatch.common.errors import ArbitrageError, ConfigError

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "off": logging.CRITICAL + 10,
}


class Worker(ABC):
    """A unit of work that runs as its own task."""

    @abstractmethod
    def spawn(self) -> asyncio.Task[str]:
        """Start the work on the running loop; the task yields a name."""

    def is_running(self) -> bool:
        return True


class RunningFlag:
    """A thread-safe on/off flag."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._running = False

    def start(self) -> None:
        with self._lock:
            self._running = True

    def stop(self) -> None:
        with self._lock:
            self._running = False

    def is_running(self) -> bool:
        with self._lock:
            return self._running


class Workers(Worker):
    """Runs a set of workers and stops them all once the first one ends.

    When a worker finishes, the exit signal is broadcast and the rest get
    ``worker_timeout_millis`` (default 5000) to finish as well.
    """

    def __init__(self, context: Context, delay_millis: int) -> None:
        self.context = context
        self.delay_millis = delay_millis
        self.running = RunningFlag()
        self._workers: list[Worker] = []

    def add_worker(self, worker: Worker) -> None:
        self._workers.append(worker)

    def spawn(self) -> asyncio.Task[str]:
        workers, self._workers = self._workers, []
        timeout_millis = self.context.config.get_int("worker_timeout_millis", 5000)
        logger.info("Starting workers for %s", self.context.name)
        return asyncio.get_running_loop().create_task(
            self._supervise(workers, timeout_millis)
        )

    async def run(self) -> str:
        """Spawn all workers and wait until they are done."""
        return await self.spawn()

    async def _supervise(self, workers: list[Worker], timeout_millis: int) -> str:
        self.running.start()
        await asyncio.sleep(self.delay_millis / 1000)

        pending = {worker.spawn() for worker in workers}
        logger.info("%s spawned %d workers", self.context.name, len(pending))

        if pending:
            done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                self._report(task)

        if not self.context.exit():
            logger.error("failed to exit")
        else:
            logger.warning("waiting for other workers to complete")
            if pending:
                done, pending = await asyncio.wait(pending, timeout=timeout_millis / 1000)
                for task in done:
                    self._report(task)
            if pending:
                logger.error(
                    "%s workers did not exit within timeout of %d ms",
                    self.context.name,
                    timeout_millis,
                )
            else:
                logger.info("all workers exited")

        self.running.stop()
        return self.context.log_and_exit("stopped")

    def _report(self, task: asyncio.Task[str]) -> None:
        if task.cancelled():
            logger.error("worker error - cancelled")
            return
        error = task.exception()
        if error is None:
            logger.info("worker %s exited", task.result())
        elif isinstance(error, ArbitrageError):
            logger.error("%s worker failed with error: %r", self.context.name, error)
        else:
            logger.error("worker error - %r", error)


class Runner(ABC):
    """An application that can be started by :func:`run_app`."""

    @abstractmethod
    async def run(self) -> str:
        """Run the application to completion."""

    @abstractmethod
    def config(self) -> Config:
        """The application's configuration."""


def _setup_telemetry(config: Config) -> None:
    level_name = config.get_string("log_level", "info").strip().lower()
    try:
        level = _LOG_LEVELS[level_name]
    except KeyError:
        raise ConfigError(f"invalid log level {level_name!r}") from None
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(threadName)s(%(thread)d) %(name)s: %(message)s",
    )


def run_app(runner: Runner) -> str:
    """Set up logging, then run ``runner`` on a new event loop."""
    config = runner.config()
    _setup_telemetry(config)
    worker_threads = config.get_int("worker_threads", 4)

    async def _main() -> str:
        asyncio.get_running_loop().set_default_executor(
            ThreadPoolExecutor(max_workers=worker_threads)
        )
        return await runner.run()

    return asyncio.run(_main())