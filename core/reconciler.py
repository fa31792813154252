import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Awaitable, Callable, Generic, Iterable, List, Optional, Set, TypeVar

from .errors import ActionInProgress, CollaboratorError, Notice
from .events import EventBus, Subscription, Topic
from .signal import CrossTabSignal, SignalListener

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ViewStateReconciler(Generic[T]):
    """
    Keeps one view's copy of server state in line with everybody else's.

    The view subscribes to topics (and optionally a cross-tab key) while it
    is mounted. Any event means "your copy is stale": a fresh fetch is
    scheduled, and whichever response resolves last is kept. Responses that
    arrive after `unmount()` are dropped.
    """

    def __init__(
        self,
        name: str,
        fetch: Callable[[], Awaitable[T]],
        bus: EventBus,
        topics: Iterable[Topic] = (),
        signal: Optional[CrossTabSignal] = None,
        signal_key: Optional[str] = None,
        on_change: Optional[Callable[[T], None]] = None,
    ):
        self.name = name
        self.fetch = fetch
        self.bus = bus
        self.topics = [Topic(t) for t in topics]
        self.signal = signal
        self.signal_key = signal_key
        self.on_change = on_change

        self.state: Optional[T] = None
        self.notice: Optional[Notice] = None
        self.mounted = False
        self.fetch_count = 0
        self._fetching = 0
        self._subscriptions: List[Subscription] = []
        self._listener: Optional[SignalListener] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def loading(self) -> bool:
        return self._fetching > 0

    async def mount(self):
        """Subscribe, then do the initial fetch."""
        if self.mounted:
            return
        self.mounted = True
        self._subscriptions = [self.bus.subscribe(topic, self.invalidate) for topic in self.topics]
        if self.signal is not None and self.signal_key:
            self._listener = self.signal.listen(self.signal_key, self.invalidate)
        await self.refresh()

    def unmount(self):
        self.mounted = False
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions = []
        if self._listener is not None:
            self._listener.unsubscribe()
            self._listener = None

    def invalidate(self):
        """Event callback: schedule a refetch without waiting for it."""
        if not self.mounted:
            return
        task = asyncio.ensure_future(self.refresh())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def refresh(self) -> Optional[T]:
        self._fetching += 1
        self.fetch_count += 1
        try:
            data = await self.fetch()
        except CollaboratorError as error:
            logger.warning("%s: refetch failed: %s", self.name, error)
            if self.mounted:
                self.notice = Notice.from_error(error)
            return self.state
        finally:
            self._fetching -= 1

        if not self.mounted:
            logger.debug("%s: dropping response that arrived after unmount", self.name)
            return None
        self.state = data
        if self.on_change is not None:
            self.on_change(data)
        return data

    async def settle(self):
        """Wait for every scheduled refetch, including ones they schedule."""
        while True:
            pending = [task for task in self._tasks if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending)

    def dismiss_notice(self):
        if self.notice is not None:
            self.notice.dismiss()
            self.notice = None


class ActionGuard:
    """At most one in-flight request per action key (e.g. one per button)."""

    def __init__(self):
        self._pending: Set = set()

    def is_pending(self, key) -> bool:
        return key in self._pending

    @asynccontextmanager
    async def hold(self, key):
        if key in self._pending:
            raise ActionInProgress(key)
        self._pending.add(key)
        try:
            yield
        finally:
            self._pending.discard(key)
