"""Bounded-parallelism execution of a chunk plan."""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, List, Optional

from common.logging_config import get_logger
from transfer.exceptions import TransferAbortedError
from transfer.planner import ChunkPlan, ChunkSpec

logger = get_logger(__name__)

ChunkWorker = Callable[..., Awaitable[Any]]
ChunkPreparer = Callable[[ChunkSpec], Any]


class CancellationToken:
    """Cooperative cancellation flag shared between a caller and a running transfer."""

    def __init__(self):
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()


class TransferScheduler:
    """
    Runs chunk operations with at most `parallelism` in flight.

    Chunks are dispatched in plan order; completion order is unconstrained.
    The first failing chunk stops dispatch of the rest, and the failure is
    re-raised once every in-flight chunk has settled. Committed chunks are
    left as they are.
    """

    def __init__(self, parallelism: int = 1, cancellation: Optional[CancellationToken] = None):
        if parallelism < 1:
            raise ValueError(f"parallelism must be at least 1, got {parallelism}")
        self.parallelism = parallelism
        self.cancellation = cancellation or CancellationToken()

    async def run(
        self,
        plan: ChunkPlan,
        worker: ChunkWorker,
        prepare: Optional[ChunkPreparer] = None,
    ) -> List[Any]:
        """
        Execute every chunk of a plan.

        Args:
            plan: Chunks to execute
            worker: Coroutine function called as worker(chunk), or as
                worker(chunk, prepared) when `prepare` is given
            prepare: Optional callable (sync or async) run for each chunk in
                plan order immediately before it is dispatched

        Returns:
            Worker results in plan order

        Raises:
            TransferAbortedError: If the cancellation token was set
            Exception: The first exception raised by `prepare` or a worker
        """
        results: List[Any] = [None] * len(plan)
        semaphore = asyncio.Semaphore(self.parallelism)
        in_flight = set()
        errors: List[BaseException] = []
        dispatched = 0

        async def run_chunk(position: int, chunk: ChunkSpec, args: tuple) -> None:
            try:
                results[position] = await worker(chunk, *args)
            except Exception as e:
                if not errors:
                    logger.warning(f"Chunk {chunk.index} ({chunk.range}) failed: {e}")
                errors.append(e)
            finally:
                semaphore.release()

        try:
            for position, chunk in enumerate(plan):
                await semaphore.acquire()
                if errors or self.cancellation.is_cancelled:
                    semaphore.release()
                    break

                args: tuple = ()
                if prepare is not None:
                    try:
                        prepared = prepare(chunk)
                        if inspect.isawaitable(prepared):
                            prepared = await prepared
                    except Exception as e:
                        semaphore.release()
                        errors.append(e)
                        break
                    args = (prepared,)

                task = asyncio.create_task(run_chunk(position, chunk, args))
                in_flight.add(task)
                task.add_done_callback(in_flight.discard)
                dispatched += 1

            if in_flight:
                await asyncio.gather(*in_flight)
        except asyncio.CancelledError:
            for task in in_flight:
                task.cancel()
            await asyncio.gather(*in_flight, return_exceptions=True)
            raise

        if errors:
            raise errors[0]
        if dispatched < len(plan):
            raise TransferAbortedError("Transfer was cancelled")

        logger.debug(f"Completed {len(plan)} chunks with parallelism {self.parallelism}")
        return results
