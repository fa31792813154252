"""
Change notifications between sibling processes of the same client.

The event bus only reaches views inside one process. To tell sibling
processes ("tabs") that something changed, a context writes a timestamp
under a well-known key in a shared table; every other context polls the
table and calls its listeners when a key was rewritten by someone else.
The writer never hears its own writes, so a view that changes favorites
must also publish on its own bus.
"""
import asyncio
import logging
import time
import uuid
from typing import Callable, Dict, List, Optional, Tuple

from config.environment import signal_poll_interval
from models.signal import SignalModel

logger = logging.getLogger(__name__)

FAVORITES_UPDATED = "favorites_updated"


class SignalListener:
    def __init__(self, signal: "CrossTabSignal", key: str, callback: Callable[[], None]):
        self.signal = signal
        self.key = key
        self.callback = callback
        self.active = True

    def unsubscribe(self):
        if self.active:
            self.active = False
            self.signal._remove(self)


class CrossTabSignal:

    def __init__(self, session_factory, context_id: Optional[str] = None):
        self.session_factory = session_factory
        self.context_id = context_id or uuid.uuid4().hex
        self._listeners: Dict[str, List[SignalListener]] = {}
        self._last_written = 0
        self._stopped: Optional[asyncio.Event] = None
        # writes made before this context existed are not news to it
        self._seen: Dict[str, Tuple[str, str]] = {
            row.key: (row.value, row.writer) for row in self._read_all()
        }

    def _read_all(self) -> List[SignalModel]:
        with self.session_factory() as db:
            rows = db.query(SignalModel).all()
            db.expunge_all()
            return rows

    def _next_value(self) -> str:
        # strictly increasing per context, even within one millisecond
        self._last_written = max(int(time.time() * 1000), self._last_written + 1)
        return str(self._last_written)

    def notify(self, key: str = FAVORITES_UPDATED) -> str:
        """Write `key = <epoch millis>` so sibling contexts refetch."""
        value = self._next_value()
        with self.session_factory() as db:
            row = db.get(SignalModel, key)
            if row is None:
                db.add(SignalModel(key=key, value=value, writer=self.context_id))
            else:
                row.value = value
                row.writer = self.context_id
            db.commit()
        self._seen[key] = (value, self.context_id)
        logger.debug("Signalled %s=%s from %s", key, value, self.context_id)
        return value

    def listen(self, key: str, callback: Callable[[], None]) -> SignalListener:
        listener = SignalListener(self, key, callback)
        self._listeners.setdefault(key, []).append(listener)
        return listener

    def _remove(self, listener: SignalListener):
        listeners = self._listeners.get(listener.key, [])
        if listener in listeners:
            listeners.remove(listener)

    def poll(self) -> List[str]:
        """Dispatch keys rewritten by other contexts since the last poll."""
        changed = []
        for row in self._read_all():
            stamp = (row.value, row.writer)
            if self._seen.get(row.key) == stamp:
                continue
            self._seen[row.key] = stamp
            if row.writer == self.context_id:
                continue
            changed.append(row.key)
            for listener in list(self._listeners.get(row.key, [])):
                if not listener.active:
                    continue
                try:
                    listener.callback()
                except Exception:
                    logger.exception("Listener for %s failed", row.key)
        return changed

    async def watch(self, interval: float = signal_poll_interval):
        """Poll until `stop()` is called."""
        self._stopped = asyncio.Event()
        while not self._stopped.is_set():
            self.poll()
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass

    def stop(self):
        if self._stopped is not None:
            self._stopped.set()
