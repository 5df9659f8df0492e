"""Producer/consumer pipe between the remote stream and the response body.

A producer task reads text chunks from the remote completion stream and
puts them on an ``asyncio.Queue``; the HTTP response writer drains the
queue. The queue is FIFO, so chunks reach the caller in arrival order.

A failure in the producer is passed through the queue and re-raised on the
consumer side. If the consumer stops early (client disconnect), the
producer task is cancelled and the source stream is closed.
"""

import asyncio
import logging
from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


class _EndOfStream:
    pass


class _RelayFailure:
    def __init__(self, error: Exception) -> None:
        self.error = error


_END = _EndOfStream()


class StreamRelay:
    """Relay text chunks from a source iterator to a single consumer.

    Usage:
        relay = StreamRelay(source)
        return StreamingResponse(relay.drain(), media_type="text/plain")
    """

    def __init__(self, source: AsyncIterator[str], maxsize: int = 0) -> None:
        """Create a relay.

        Args:
            source: Async iterator of text chunks (the remote stream).
            maxsize: Queue bound; 0 means unbounded.
        """
        self._source = source
        self._queue: asyncio.Queue[str | _EndOfStream | _RelayFailure] = asyncio.Queue(
            maxsize
        )
        self._producer: asyncio.Task[None] | None = None
        self.chunks_relayed = 0

    async def _produce(self) -> None:
        try:
            async for chunk in self._source:
                await self._queue.put(chunk)
        except Exception as e:
            await self._queue.put(_RelayFailure(e))
        else:
            await self._queue.put(_END)
        finally:
            await self._close_source()

    async def _close_source(self) -> None:
        aclose = getattr(self._source, "aclose", None)
        if aclose is not None:
            await aclose()

    async def drain(self) -> AsyncIterator[str]:
        """Yield relayed chunks until the source ends.

        Raises:
            Exception: Whatever the source raised, after the chunks that
                preceded the failure have been yielded.
        """
        if self._producer is not None:
            raise RuntimeError("StreamRelay can only be drained once")
        self._producer = asyncio.create_task(self._produce())
        try:
            while True:
                item = await self._queue.get()
                if isinstance(item, _EndOfStream):
                    logger.info(f"Stream relay complete: {self.chunks_relayed} chunks")
                    return
                if isinstance(item, _RelayFailure):
                    logger.error(
                        f"Remote stream failed after {self.chunks_relayed} chunks: "
                        f"{item.error}"
                    )
                    raise item.error
                self.chunks_relayed += 1
                yield item
        finally:
            if not self._producer.done():
                logger.info(f"Consumer left after {self.chunks_relayed} chunks, stopping relay")
                self._producer.cancel()
                await asyncio.wait({self._producer})
