from typing import List, Optional

from serializers.booking import BookingCreate, BookingSchema
from .client import ApiClient, parse_many, parse_one

BASE_PATH = "/api/bookings"


class BookingsService:

    def __init__(self, client: ApiClient):
        self.client = client

    async def create_booking(self, activity_id: int, tickets_number: int = 1) -> BookingSchema:
        """
        Book tickets for the signed-in customer.

        Fails with CAPACITY_EXCEEDED, ALREADY_BOOKED, ACTOR_NOT_ALLOWED (admins)
        or NOT_FOUND.
        """
        payload = BookingCreate(activity_id=activity_id, tickets_number=tickets_number)
        data = await self.client.request("POST", f"{BASE_PATH}/", json=payload.model_dump())
        return parse_one(BookingSchema, data)

    async def cancel_booking(self, booking_id: int) -> dict:
        return await self.client.request("DELETE", f"{BASE_PATH}/{booking_id}")

    async def get_my_bookings(self, status_filter: Optional[str] = None) -> List[BookingSchema]:
        params = {"status_filter": status_filter} if status_filter else None
        data = await self.client.request("GET", f"{BASE_PATH}/my", params=params)
        return parse_many(BookingSchema, data)

    async def get_booking(self, booking_id: int) -> BookingSchema:
        data = await self.client.request("GET", f"{BASE_PATH}/{booking_id}")
        return parse_one(BookingSchema, data)
