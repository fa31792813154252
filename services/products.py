from typing import List, Optional

from serializers.product import ProductSchema
from .client import ApiClient, parse_many, parse_one

BASE_PATH = "/api/products"

# the API caps `limit` at 100
MAX_LIMIT = 100


class ProductsService:

    def __init__(self, client: ApiClient):
        self.client = client

    async def index(self, category: Optional[str] = None, search: Optional[str] = None, limit: int = MAX_LIMIT, offset: int = 0) -> List[ProductSchema]:
        """Active products, newest first."""
        params = {"limit": min(limit, MAX_LIMIT), "offset": offset}
        if category:
            params["category"] = category
        if search:
            params["search"] = search
        data = await self.client.request("GET", BASE_PATH, params=params)
        return parse_many(ProductSchema, data)

    async def show(self, product_id: int) -> ProductSchema:
        data = await self.client.request("GET", f"{BASE_PATH}/{product_id}")
        return parse_one(ProductSchema, data)
