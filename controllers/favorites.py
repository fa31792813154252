import logging
from typing import Optional

from core.errors import CollaboratorError, ErrorKind, Notice, USER_MESSAGES
from core.events import EventBus, Topic
from core.optimistic import Mutation, OptimisticToggleSet
from core.reconciler import ViewStateReconciler
from core.signal import FAVORITES_UPDATED, CrossTabSignal
from models.favorite import FavoriteType
from serializers.favorite import FavoriteIdsSchema
from serializers.user import CurrentUser
from services.favorites import FavoritesService

logger = logging.getLogger(__name__)

FILTERS = ("all", "products", "activities")


class FavoritesController:
    """
    Heart buttons and the favorites tab.

    The set of favorited (item_type, item_id) pairs is refetched whenever
    another view in this process publishes `favoriteUpdated` or another
    process writes `favorites_updated`. Toggles are optimistic.
    """

    def __init__(
        self,
        favorites: FavoritesService,
        bus: EventBus,
        signal: Optional[CrossTabSignal] = None,
        user: Optional[CurrentUser] = None,
    ):
        self.favorites_service = favorites
        self.bus = bus
        self.signal = signal
        self.user = user
        self.notice: Optional[Notice] = None
        self.toggles = OptimisticToggleSet(on_success=self._broadcast)
        self.favorites = ViewStateReconciler(
            "favorites",
            favorites.get_favorite_ids,
            bus,
            topics=(Topic.FAVORITE_UPDATED,),
            signal=signal,
            signal_key=FAVORITES_UPDATED,
            on_change=self._load,
        )

    async def mount(self):
        await self.favorites.mount()

    def unmount(self):
        self.favorites.unmount()

    def _load(self, ids: FavoriteIdsSchema):
        self.toggles.load(
            {(FavoriteType.PRODUCT, i) for i in ids.products}
            | {(FavoriteType.ACTIVITY, i) for i in ids.activities}
        )

    def _broadcast(self, mutation: Mutation):
        if self.signal is not None:
            self.signal.notify(FAVORITES_UPDATED)
        self.bus.publish(Topic.FAVORITE_UPDATED)

    def is_favorited(self, item_id: int, item_type: FavoriteType) -> bool:
        return (FavoriteType(item_type), item_id) in self.toggles

    def favorite_ids(self, favorite_filter: str = "all") -> FavoriteIdsSchema:
        """Current (optimistic) ids, for the all / products / activities sub-filter."""
        if favorite_filter not in FILTERS:
            raise ValueError(f"favorite_filter must be one of {FILTERS}")
        ids = self.toggles.ids
        products = sorted(i for t, i in ids if t == FavoriteType.PRODUCT)
        activities = sorted(i for t, i in ids if t == FavoriteType.ACTIVITY)
        return FavoriteIdsSchema(
            products=products if favorite_filter in ("all", "products") else [],
            activities=activities if favorite_filter in ("all", "activities") else [],
        )

    async def toggle(self, item_id: int, item_type: FavoriteType) -> bool:
        """Flip one heart. Returns whether the item is favorited afterwards."""
        item_type = FavoriteType(item_type)
        key = (item_type, item_id)
        if self.user is None:
            self.notice = Notice(ErrorKind.NOT_SIGNED_IN.value, USER_MESSAGES[ErrorKind.NOT_SIGNED_IN])
            return key in self.toggles

        async def send(target: bool):
            if target:
                await self.favorites_service.add_favorite(item_id, item_type)
            else:
                await self.favorites_service.remove_favorite(item_id, item_type)

        try:
            await self.toggles.toggle(key, send)
        except CollaboratorError as error:
            self.notice = Notice(error.kind.value, "Could not update your favorites. Please try again.")
        return key in self.toggles

    def dismiss_notice(self):
        if self.notice is not None:
            self.notice.dismiss()
            self.notice = None
