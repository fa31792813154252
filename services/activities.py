from typing import List, Optional

from serializers.activity import ActivitySchema
from .client import ApiClient, parse_many, parse_one

BASE_PATH = "/api/activities"


class ActivitiesService:

    def __init__(self, client: ApiClient):
        self.client = client

    async def index(self, upcoming_only: bool = True, search: Optional[str] = None) -> List[ActivitySchema]:
        """Public activity list, soonest first."""
        params = {"upcoming_only": "true" if upcoming_only else "false"}
        if search:
            params["search"] = search
        data = await self.client.request("GET", f"{BASE_PATH}/", params=params)
        return parse_many(ActivitySchema, data)

    async def show(self, activity_id: int) -> ActivitySchema:
        data = await self.client.request("GET", f"{BASE_PATH}/{activity_id}")
        return parse_one(ActivitySchema, data)
