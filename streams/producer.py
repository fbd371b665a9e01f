"""Lazy asynchronous producers and the operators used to compose them."""
import asyncio
import logging
from typing import (
    Any, AsyncIterator, Awaitable, Callable, Generic, List, Optional, TypeVar
)

logger = logging.getLogger(__name__)

T = TypeVar('T')
U = TypeVar('U')


class Producer(Generic[T]):
    """
    Cold asynchronous stream.

    Nothing runs until the producer is iterated; every ``async for`` over it
    is an independent subscription that calls the factory again.
    """

    def __init__(self, factory: Callable[[], AsyncIterator[T]]):
        """
        Initialize the producer.

        Args:
            factory: Zero-argument callable returning a fresh async iterator
        """
        self._factory = factory

    def __aiter__(self) -> AsyncIterator[T]:
        return self._factory()

    @classmethod
    def just(cls, value: T) -> 'Producer[T]':
        """Producer that emits a single value and completes."""
        async def emit():
            yield value
        return cls(emit)

    @classmethod
    def empty(cls) -> 'Producer[Any]':
        """Producer that completes without emitting."""
        async def emit():
            return
            yield
        return cls(emit)

    @classmethod
    def fail(cls, error: Exception) -> 'Producer[Any]':
        """Producer that terminates with the given error."""
        async def emit():
            raise error
            yield
        return cls(emit)

    @classmethod
    def from_coroutine(cls, func: Callable[..., Awaitable[T]], *args: Any) -> 'Producer[T]':
        """
        Producer that awaits ``func(*args)`` on subscription and emits its result.

        Args:
            func: Coroutine function to call per subscription
            *args: Positional arguments passed to func

        Returns:
            Producer emitting exactly one value
        """
        async def emit():
            yield await func(*args)
        return cls(emit)

    @staticmethod
    def merge(*producers: 'Producer[T]') -> 'Producer[T]':
        """
        Run all producers concurrently and forward items as they arrive.

        Completes once every source has completed. The first source error is
        raised to the subscriber and the remaining sources are cancelled, as
        they are when the subscriber stops iterating early.

        Args:
            *producers: Source producers

        Returns:
            Merged producer
        """
        async def emit():
            queue: asyncio.Queue = asyncio.Queue()

            async def pump(source: Producer[T]) -> None:
                try:
                    async for item in source:
                        await queue.put(('item', item))
                except Exception as e:
                    await queue.put(('error', e))
                else:
                    await queue.put(('done', None))

            tasks = [asyncio.create_task(pump(source)) for source in producers]
            remaining = len(tasks)
            try:
                while remaining:
                    kind, payload = await queue.get()
                    if kind == 'item':
                        yield payload
                    elif kind == 'done':
                        remaining -= 1
                    else:
                        raise payload
            finally:
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)

        return Producer(emit)

    def map(self, fn: Callable[[T], U]) -> 'Producer[U]':
        """Apply fn to every item."""
        async def emit():
            async for item in self:
                yield fn(item)
        return Producer(emit)

    def reduce(self, seed: U, fn: Callable[[U, T], U]) -> 'Producer[U]':
        """
        Fold all items into one value emitted when the source completes.

        Args:
            seed: Initial accumulator
            fn: Accumulator function taking (accumulator, item)

        Returns:
            Producer emitting exactly one value
        """
        async def emit():
            accumulated = seed
            async for item in self:
                accumulated = fn(accumulated, item)
            yield accumulated
        return Producer(emit)

    def catch_and_return(self, value: T, description: str = 'producer') -> 'Producer[T]':
        """
        Replace any error terminating the source with a single value.

        The error is logged and the stream completes normally. Cancellation
        is not intercepted.

        Args:
            value: Value emitted in place of the error
            description: Name of the stream used in the log message

        Returns:
            Producer that never terminates with an error
        """
        async def emit():
            try:
                async for item in self:
                    yield item
            except Exception as e:
                logger.warning(
                    f"Error in {description}, emitting fallback value: {e}",
                    extra={'error_type': type(e).__name__},
                    exc_info=True
                )
                yield value
        return Producer(emit)

    def default_if_empty(self, value: T) -> 'Producer[T]':
        """Emit value if the source completes without emitting anything."""
        async def emit():
            emitted = False
            async for item in self:
                emitted = True
                yield item
            if not emitted:
                yield value
        return Producer(emit)

    def share_replay(self) -> 'SharedProducer[T]':
        """Share one upstream run across all subscribers, replaying its last value."""
        return SharedProducer(self)

    async def first(self, default: Optional[T] = None) -> Optional[T]:
        """
        Subscribe, return the first item and cancel the rest of the stream.

        Args:
            default: Returned when the stream completes without items

        Returns:
            First item or default
        """
        iterator = self.__aiter__()
        try:
            return await iterator.__anext__()
        except StopAsyncIteration:
            return default
        finally:
            aclose = getattr(iterator, 'aclose', None)
            if aclose is not None:
                await aclose()

    async def to_list(self) -> List[T]:
        """Subscribe and collect every item until completion."""
        return [item async for item in self]


class SharedProducer(Producer[T]):
    """
    Producer whose upstream runs once for the lifetime of this object.

    The first subscriber starts the upstream as a task; every subscriber
    arriving before it completes awaits that same task and receives all of
    its items. The last item is kept and replayed to later subscribers
    without touching the upstream again. Cancelling a subscriber does not
    cancel the run. If the run fails, its waiters get the error, nothing is
    cached and the next subscriber starts a new run.
    """

    def __init__(self, source: Producer[T]):
        self._source = source
        self._run: Optional[asyncio.Future] = None
        self._generation = 0
        self._completed = False
        self._has_value = False
        self._value: Optional[T] = None
        super().__init__(self._subscribe)

    @property
    def cached(self) -> bool:
        """True once the upstream has completed and its result is stored."""
        return self._completed

    def invalidate(self) -> None:
        """Drop the cached value so the next subscriber reruns the upstream."""
        logger.info("Invalidating shared producer cache")
        self._run = None
        self._generation += 1
        self._completed = False
        self._has_value = False
        self._value = None

    async def _collect(self, generation: int) -> List[T]:
        items = [item async for item in self._source]
        if generation != self._generation:
            return items
        if items:
            self._value = items[-1]
            self._has_value = True
        self._completed = True
        logger.debug(f"Shared producer cached after {len(items)} item(s)")
        return items

    def _run_done(self, run: asyncio.Future) -> None:
        if run.cancelled() or run.exception() is not None:
            if self._run is run:
                self._run = None

    async def _subscribe(self) -> AsyncIterator[T]:
        if self._completed:
            if self._has_value:
                yield self._value
            return

        if self._run is None:
            self._run = asyncio.ensure_future(self._collect(self._generation))
            self._run.add_done_callback(self._run_done)

        items = await asyncio.shield(self._run)
        for item in items:
            yield item
