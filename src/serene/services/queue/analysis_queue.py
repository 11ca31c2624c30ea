"""
Analysis Request Queue

Single cooperative worker that drains AnalysisRequests in FIFO order,
one at a time, with a fixed delay between items to bound load on the
generative-AI backend.

Guarantees:
- enqueue() never blocks and never waits for analysis
- at most one request is processed at a time, in enqueue order
- a failing item is isolated: wrapped in QueueItemError, logged,
  reported, and the loop moves on
- the request id is bound as the log correlation id while an item
  is processed
"""

import asyncio
import time
from collections import deque
from typing import Any, Awaitable, Callable, Optional

from serene.config.logging_config import bind_analysis_context, clear_context, get_logger
from serene.domain.enums import PipelineState
from serene.domain.errors import QueueClosedError, QueueItemError
from serene.domain.models import AnalysisRequest
from serene.infrastructure.metrics import QUEUE_DEPTH, track_queue_item
from serene.infrastructure.monitoring import capture_exception_with_context

logger = get_logger(__name__)

Processor = Callable[[AnalysisRequest], Awaitable[Any]]


class AnalysisQueue:
    """
    FIFO queue with one draining worker task.

    The processor's return value may carry a ``state`` attribute
    (PipelineState) used to label the outcome metric.

    Usage:
        queue = AnalysisQueue(pipeline.process, inter_item_delay=1.0)
        queue.enqueue(request)
        await queue.join()
        await queue.stop()
    """

    def __init__(self, processor: Processor, inter_item_delay: float = 1.0) -> None:
        self._processor = processor
        self._delay = inter_item_delay
        self._pending: deque[AnalysisRequest] = deque()
        self._task: Optional[asyncio.Task] = None
        self._idle = asyncio.Event()
        self._idle.set()
        self._stopping = asyncio.Event()
        self._closed = False
        self._last_finished: Optional[float] = None
        self._processed = 0
        self._failed = 0

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def is_draining(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def processed_count(self) -> int:
        return self._processed

    @property
    def failed_count(self) -> int:
        return self._failed

    def enqueue(self, request: AnalysisRequest) -> None:
        """
        Append a request and make sure the worker is draining.

        Raises:
            QueueClosedError: If the queue was stopped
        """
        if self._closed:
            raise QueueClosedError(f"Queue stopped; request {request.id} not accepted")

        self._pending.append(request)
        QUEUE_DEPTH.set(len(self._pending))
        self._idle.clear()

        if not self.is_draining:
            self._task = asyncio.get_running_loop().create_task(self._drain())

        logger.debug("Analysis request queued", request_id=request.id, depth=len(self._pending))

    async def join(self) -> None:
        """Wait until every queued request has been processed."""
        await self._idle.wait()

    async def stop(self) -> None:
        """Stop accepting requests and stop after the current item."""
        self._closed = True
        self._stopping.set()
        if self._task is not None:
            await self._task
        if self._pending:
            logger.warning("Queue stopped with pending requests", pending=len(self._pending))
        self._idle.set()

    async def _wait_inter_item_delay(self) -> None:
        if self._last_finished is None or self._delay <= 0:
            return
        remaining = self._delay - (time.monotonic() - self._last_finished)
        if remaining <= 0:
            return
        try:
            await asyncio.wait_for(self._stopping.wait(), timeout=remaining)
        except asyncio.TimeoutError:
            pass

    async def _drain(self) -> None:
        try:
            while self._pending and not self._closed:
                await self._wait_inter_item_delay()
                if self._closed:
                    break

                request = self._pending.popleft()
                QUEUE_DEPTH.set(len(self._pending))
                await self._process_one(request)
                self._last_finished = time.monotonic()
        finally:
            if not self._pending or self._closed:
                self._idle.set()

    async def _process_one(self, request: AnalysisRequest) -> None:
        bind_analysis_context(request.id, request.user_id)
        start = time.perf_counter()
        try:
            result = await self._processor(request)
        except Exception as e:
            duration = time.perf_counter() - start
            self._failed += 1
            error = QueueItemError(request.id, e)
            logger.error(
                "Analysis request failed",
                request_id=request.id,
                error_type=type(e).__name__,
                error=str(e),
            )
            capture_exception_with_context(error, request_id=request.id)
            track_queue_item(PipelineState.FAILED.value, duration)
        else:
            duration = time.perf_counter() - start
            self._processed += 1
            state = getattr(result, "state", PipelineState.SUCCEEDED)
            track_queue_item(str(state), duration)
            logger.debug("Analysis request processed", request_id=request.id, duration_s=round(duration, 3))
        finally:
            clear_context()
