import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Set

from config.environment import page_size
from controllers.favorites import FavoritesController
from controllers.listing import ListInputs
from core.errors import Notice
from core.events import EventBus
from core.pipeline import PRODUCT_FIELDS, ListQuery, PageResult, derive_categories
from core.reconciler import ViewStateReconciler
from models.favorite import FavoriteType
from services.products import ProductsService

logger = logging.getLogger(__name__)


@dataclass
class ProductListView:
    page: PageResult
    categories: List[str]
    favorite_ids: Set[int] = field(default_factory=set)
    notice: Optional[Notice] = None


class ProductListController(ListInputs):
    """
    Product list page. Products carry no lifecycle, so the status input stays
    at "all"; hearts go through the shared favorites controller when one is
    given.
    """

    def __init__(
        self,
        products: ProductsService,
        bus: EventBus,
        favorites: Optional[FavoritesController] = None,
        size: int = page_size,
    ):
        self.favorites = favorites
        self.query = ListQuery(page_size=size)
        # nothing a client does changes the catalogue, so no topics
        self.products = ViewStateReconciler("product-list", products.index, bus)

    async def mount(self):
        if self.favorites is not None:
            await asyncio.gather(self.products.mount(), self.favorites.mount())
        else:
            await self.products.mount()

    def unmount(self):
        self.products.unmount()
        if self.favorites is not None:
            self.favorites.unmount()

    def is_favorited(self, product_id: int) -> bool:
        return self.favorites is not None and self.favorites.is_favorited(product_id, FavoriteType.PRODUCT)

    async def toggle_favorite(self, product_id: int) -> bool:
        if self.favorites is None:
            logger.debug("No favorites controller, ignoring heart on product %s", product_id)
            return False
        return await self.favorites.toggle(product_id, FavoriteType.PRODUCT)

    def view(self) -> ProductListView:
        items = self.products.state or []
        favorite_ids = set(self.favorites.favorite_ids("products").products) if self.favorites is not None else set()
        return ProductListView(
            page=self.run_query(items, PRODUCT_FIELDS),
            categories=derive_categories(items),
            favorite_ids=favorite_ids,
            notice=self.products.notice or (self.favorites.notice if self.favorites is not None else None),
        )
