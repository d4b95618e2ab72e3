"""Asynchronous channels: many-to-one queues and fan-out broadcasts."""

from __future__ import annotations

import asyncio
import weakref
from collections import deque
from typing import Generic, TypeVar

from arbwatch.common.errors import GenericError

M = TypeVar("M")


class Sender(Generic[M]):
    """Producing end of a bounded queue; any number may exist."""

    def __init__(self, queue: asyncio.Queue[M]) -> None:
        self._queue = queue

    async def send(self, message: M) -> None:
        """Put ``message`` on the queue, waiting for room if it is full."""
        await self._queue.put(message)

    def try_send(self, message: M) -> None:
        """Put ``message`` on the queue or raise if it is full."""
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull:
            raise GenericError("no available capacity") from None


class Receiver(Generic[M]):
    """Consuming end of a bounded queue; only one exists."""

    def __init__(self, queue: asyncio.Queue[M]) -> None:
        self._queue = queue

    async def recv(self) -> M:
        """Wait for and return the next message."""
        return await self._queue.get()


class MpSc(Generic[M]):
    """A multi-producer, single-consumer channel.

    The channel is created once; copies made with :meth:`clone` share the
    queue but not the receiver, which :meth:`receiver` hands out only once.
    """

    def __init__(self, buffer_size: int) -> None:
        if buffer_size < 1:
            raise ValueError("buffer_size must be at least 1")
        self._queue: asyncio.Queue[M] = asyncio.Queue(maxsize=buffer_size)
        self._receiver: Receiver[M] | None = Receiver(self._queue)

    @classmethod
    def _sharing(cls, queue: asyncio.Queue[M], receiver: Receiver[M] | None) -> MpSc[M]:
        channel = cls.__new__(cls)
        channel._queue = queue
        channel._receiver = receiver
        return channel

    def sender(self) -> Sender[M]:
        """A new sender onto this channel."""
        return Sender(self._queue)

    def receiver(self) -> Receiver[M] | None:
        """Take the receiver; later calls return ``None``."""
        receiver, self._receiver = self._receiver, None
        return receiver

    def clone(self) -> MpSc[M]:
        """A copy that can send but holds no receiver."""
        return MpSc._sharing(self._queue, None)

    __copy__ = clone

    def clone_with_receiver(self) -> MpSc[M]:
        """A copy that takes over this channel's receiver."""
        return MpSc._sharing(self._queue, self.receiver())


class BroadcastReceiver(Generic[M]):
    """One subscriber's view of a :class:`Broadcaster`."""

    def __init__(self, capacity: int) -> None:
        self._capacity = capacity
        self._pending: deque[M] = deque()
        self._lagged = 0
        self._ready = asyncio.Event()

    def _deliver(self, message: M) -> None:
        if len(self._pending) >= self._capacity:
            self._pending.popleft()
            self._lagged += 1
        self._pending.append(message)
        self._ready.set()

    async def recv(self) -> M:
        """Wait for the next message.

        Raises :class:`GenericError` once if messages were dropped because this
        subscriber fell more than the capacity behind.
        """
        while not self._pending:
            self._ready.clear()
            await self._ready.wait()
        if self._lagged:
            skipped, self._lagged = self._lagged, 0
            raise GenericError(f"channel lagged by {skipped}")
        return self._pending.popleft()


class Broadcaster(Generic[M]):
    """Sends every message to all live subscribers."""

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._receivers: weakref.WeakSet[BroadcastReceiver[M]] = weakref.WeakSet()

    def subscribe(self) -> BroadcastReceiver[M]:
        """A receiver that gets every message sent from now on."""
        receiver: BroadcastReceiver[M] = BroadcastReceiver(self._capacity)
        self._receivers.add(receiver)
        return receiver

    def send(self, message: M) -> int:
        """Deliver ``message`` to all subscribers and return how many got it.

        Raises :class:`GenericError` when nobody is subscribed.
        """
        receivers = list(self._receivers)
        if not receivers:
            raise GenericError("channel closed")
        for receiver in receivers:
            receiver._deliver(message)
        return len(receivers)