"""Worker and WorkerPool for pull-based event processing."""

import asyncio
import logging
from typing import Any

from dishka import AsyncContainer

from datareg.domain.shared.event import EventHandler, WorkerConfig, WorkerState, WorkerStatus
from datareg.domain.shared.outbox import Outbox
from datareg.domain.shared.port.unit_of_work import UnitOfWork
from datareg.util.di.scope import Scope

logger = logging.getLogger(__name__)


class Worker:
    """Pull-based event worker that delegates to an EventHandler.

    The worker's name (the handler class name) is its consumer group: it only
    ever claims deliveries addressed to that group. The claim is committed
    before the handler runs, so a slow handler never holds the database write
    lock that registry operations need.

    Configuration is read from the handler's class variables:
        __event_types__: Event types to claim, in commit order
        __batch_size__: Max events per batch
        __poll_interval__: Seconds between polls when idle
        __max_retries__: Max retry attempts before marking failed
        __claim_timeout__: Seconds before claim considered stale

    Example:
        worker = Worker(ForwardRegistryNotifications)
        worker.set_container(container)
        worker.start()
    """

    def __init__(
        self, handler_type: type[EventHandler[Any]], poll_interval: float | None = None
    ) -> None:
        self._handler_type = handler_type
        self._config = WorkerConfig(
            name=handler_type.__name__,
            event_types=handler_type.__event_types__,
            batch_size=handler_type.__batch_size__,
            poll_interval=poll_interval or handler_type.__poll_interval__,
            max_retries=handler_type.__max_retries__,
            claim_timeout=handler_type.__claim_timeout__,
        )
        self._state = WorkerState(config=self._config)
        self._shutdown = False
        self._task: asyncio.Task | None = None
        self._container: AsyncContainer | None = None

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def handler_type(self) -> type[EventHandler[Any]]:
        return self._handler_type

    @property
    def config(self) -> WorkerConfig:
        return self._config

    @property
    def state(self) -> WorkerState:
        return self._state

    def set_container(self, container: AsyncContainer) -> None:
        """Set the DI container for scoped dependency resolution."""
        self._container = container

    def start(self) -> asyncio.Task:
        """Start the worker in a background task."""
        if self._container is None:
            raise RuntimeError("Container not set. Call set_container() first.")

        self._shutdown = False
        self._task = asyncio.create_task(self._run(), name=f"worker-{self.name}")
        logger.info(f"Worker '{self.name}' started")
        return self._task

    def stop(self) -> None:
        """Signal the worker to stop after its current batch."""
        self._shutdown = True
        self._state.status = WorkerStatus.STOPPING
        logger.info(f"Worker '{self.name}' stopping...")

    async def _run(self) -> None:
        try:
            while not self._shutdown:
                had_events = await self._poll_once()
                if not had_events:
                    await asyncio.sleep(self._config.poll_interval)
        except asyncio.CancelledError:
            logger.info(f"Worker '{self.name}' cancelled")
            raise
        except Exception as e:
            logger.exception(f"Worker '{self.name}' crashed: {e}")
            self._state.error = e
            raise
        finally:
            logger.info(f"Worker '{self.name}' stopped")

    async def _poll_once(self) -> bool:
        """Execute one poll cycle: claim, process, and record the outcome.

        Returns:
            True if events were processed, False if idle.
        """
        if self._container is None:
            raise RuntimeError("Container not set")

        self._state.status = WorkerStatus.CLAIMING

        async with self._container(scope=Scope.UOW) as scope:
            outbox = await scope.get(Outbox)
            uow = await scope.get(UnitOfWork)

            result = await outbox.claim(
                event_types=list(self._config.event_types),
                limit=self._config.batch_size,
                consumer_group=self.name,
            )
            await uow.commit()

            if not result:
                self._state.status = WorkerStatus.IDLE
                return False

            self._state.status = WorkerStatus.PROCESSING
            self._state.current_batch = result.events
            self._state.last_claim_at = result.claimed_at

            try:
                handler = await scope.get(self._handler_type)
                if self._config.batch_size > 1:
                    await handler.handle_batch(result.events)
                else:
                    await handler.handle(result.events[0])

                for event in result.events:
                    await outbox.mark_delivered(event.id, self.name)
                self._state.processed_count += len(result)

            except Exception as e:
                self._state.failed_count += len(result)
                self._state.error = e
                logger.error(f"Worker '{self.name}' batch failed: {e}")
                for event in result.events:
                    await outbox.mark_failed_with_retry(
                        event.id,
                        self.name,
                        str(e),
                        max_retries=self._config.max_retries,
                    )

            finally:
                self._state.current_batch = []
                self._state.status = WorkerStatus.IDLE

        return True


class WorkerPool:
    """Manages one worker per handler type, plus stale claim cleanup.

    Usage:
        pool = WorkerPool(container)
        pool.register(ForwardRegistryNotifications)

        async with pool:
            ...  # workers are running
        # workers are stopped
    """

    def __init__(
        self,
        container: AsyncContainer | None = None,
        stale_claim_interval: float = 60.0,
        poll_interval: float | None = None,
    ) -> None:
        self._container = container
        self._workers: list[Worker] = []
        self._stale_claim_interval = stale_claim_interval
        self._poll_interval = poll_interval
        self._stale_claim_task: asyncio.Task | None = None
        self._shutdown = False

    def set_container(self, container: AsyncContainer) -> None:
        self._container = container
        for worker in self._workers:
            worker.set_container(container)

    @property
    def workers(self) -> list[Worker]:
        return self._workers

    def register(self, handler_type: type[EventHandler[Any]]) -> Worker:
        """Register an EventHandler type and create a Worker for it."""
        worker = Worker(handler_type, poll_interval=self._poll_interval)
        if self._container is not None:
            worker.set_container(self._container)
        self._workers.append(worker)
        logger.debug(f"Registered handler '{handler_type.__name__}' as worker")
        return worker

    def get_worker(self, name: str) -> Worker | None:
        for worker in self._workers:
            if worker.name == name:
                return worker
        return None

    async def start(self) -> None:
        """Start all workers and the stale claim cleanup task."""
        if self._container is None:
            raise RuntimeError("Container not set. Call set_container() first.")

        self._shutdown = False
        for worker in self._workers:
            worker.set_container(self._container)
            worker.start()

        if self._stale_claim_interval > 0:
            self._stale_claim_task = asyncio.create_task(
                self._run_stale_claim_cleanup(), name="stale-claim-cleanup"
            )

        logger.info(f"WorkerPool started with {len(self._workers)} workers")

    async def stop(self, timeout: float = 30.0) -> None:
        """Stop all workers gracefully, cancelling any still busy after timeout."""
        self._shutdown = True

        for worker in self._workers:
            worker.stop()

        if self._stale_claim_task and not self._stale_claim_task.done():
            self._stale_claim_task.cancel()
            try:
                await self._stale_claim_task
            except asyncio.CancelledError:
                pass

        tasks = [w._task for w in self._workers if w._task and not w._task.done()]
        if tasks:
            _, pending = await asyncio.wait(tasks, timeout=timeout)
            for task in pending:
                task.cancel()

        logger.info("WorkerPool stopped")

    async def __aenter__(self) -> "WorkerPool":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        await self.stop()

    async def _run_stale_claim_cleanup(self) -> None:
        """Periodically return claims abandoned by crashed workers to pending."""
        while not self._shutdown:
            try:
                await asyncio.sleep(self._stale_claim_interval)

                if self._shutdown or self._container is None or not self._workers:
                    break

                max_timeout = max(w.config.claim_timeout for w in self._workers)
                async with self._container(scope=Scope.UOW) as scope:
                    outbox = await scope.get(Outbox)
                    count = await outbox.reset_stale_claims(max_timeout)
                    if count > 0:
                        logger.info(f"Reset {count} stale claims")

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Stale claim cleanup failed: {e}")
