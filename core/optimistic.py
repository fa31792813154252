"""
Optimistic add/remove toggles over a set of ids (favorites).

The local set flips as soon as the user clicks; the request follows. Each
toggle carries the value it replaced. While requests for an item are in
flight the local value is the latest optimistic one; once the last of them
settles the local value becomes the last value the server confirmed. For a
single failed toggle that is its pre-toggle value.
"""
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Hashable, Iterable, Optional, Set

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Mutation:
    item: Hashable
    previous: bool
    target: bool


class OptimisticToggleSet:

    def __init__(self, ids: Iterable[Hashable] = (), on_success: Optional[Callable[[Mutation], None]] = None):
        self.on_success = on_success
        self._local: Set[Hashable] = set(ids)
        self._confirmed: Set[Hashable] = set(self._local)
        self._in_flight: Dict[Hashable, int] = {}

    def __contains__(self, item) -> bool:
        return item in self._local

    @property
    def ids(self) -> Set[Hashable]:
        return set(self._local)

    def is_pending(self, item) -> bool:
        return self._in_flight.get(item, 0) > 0

    def load(self, ids: Iterable[Hashable]):
        """Take a freshly fetched set; items with requests in flight keep their optimistic value."""
        self._confirmed = set(ids)
        local = set(self._confirmed)
        for item in self._in_flight:
            if item in self._local:
                local.add(item)
            else:
                local.discard(item)
        self._local = local

    def _set_local(self, item, value: bool):
        if value:
            self._local.add(item)
        else:
            self._local.discard(item)

    async def toggle(self, item, send: Callable[[bool], Awaitable[object]]) -> Mutation:
        """
        Flip `item` locally, then `await send(target)`.

        `send(True)` must add the item on the server and `send(False)` remove
        it. Errors from `send` propagate after the local value is restored.
        """
        previous = item in self._local
        mutation = Mutation(item=item, previous=previous, target=not previous)
        self._set_local(item, mutation.target)
        self._in_flight[item] = self._in_flight.get(item, 0) + 1

        try:
            await send(mutation.target)
        except BaseException:
            # includes cancellation, which must not leave the item flipped
            logger.warning("Toggle of %r failed, rolling back to %s", item, mutation.previous)
            self._settle(item)
            raise

        if mutation.target:
            self._confirmed.add(item)
        else:
            self._confirmed.discard(item)
        self._settle(item)
        if self.on_success is not None:
            self.on_success(mutation)
        return mutation

    def _settle(self, item):
        remaining = self._in_flight[item] - 1
        if remaining:
            self._in_flight[item] = remaining
            return
        del self._in_flight[item]
        self._set_local(item, item in self._confirmed)
