import logging
from typing import Optional

from core.errors import CollaboratorError, ErrorKind
from models.favorite import FavoriteType
from serializers.favorite import FavoriteCreate, FavoriteIdsSchema, FavoriteResponse
from .client import ApiClient, parse_one

logger = logging.getLogger(__name__)

BASE_PATH = "/api/favorites"


class FavoritesService:

    def __init__(self, client: ApiClient):
        self.client = client

    def _require_sign_in(self):
        if not self.client.signed_in:
            raise CollaboratorError(ErrorKind.NOT_SIGNED_IN)

    async def get_favorite_ids(self, item_type: Optional[FavoriteType] = None) -> FavoriteIdsSchema:
        """Ids of favorited items grouped by type. Anonymous users have none."""
        if not self.client.signed_in:
            logger.debug("No token, returning empty favorites")
            return FavoriteIdsSchema()
        params = {"item_type": FavoriteType(item_type).value} if item_type else None
        data = await self.client.request("GET", f"{BASE_PATH}/ids", params=params)
        return parse_one(FavoriteIdsSchema, data)

    async def add_favorite(self, item_id: int, item_type: FavoriteType) -> FavoriteResponse:
        self._require_sign_in()
        payload = FavoriteCreate(item_id=item_id, item_type=item_type)
        data = await self.client.request("POST", BASE_PATH, json=payload.model_dump())
        return parse_one(FavoriteResponse, data)

    async def remove_favorite(self, item_id: int, item_type: FavoriteType) -> dict:
        """Idempotent: removing an item that is not a favorite succeeds."""
        self._require_sign_in()
        return await self.client.request("DELETE", f"{BASE_PATH}/{FavoriteType(item_type).value}/{item_id}")
