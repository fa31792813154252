"""
In-memory stand-in for the FarmVenture API.

Same routes and status codes as the real backend, but refusals carry a
structured `{"code", "message"}` detail so the client never has to read
the message text.
"""
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Query, status
from pydantic import BaseModel


class BookingIn(BaseModel):
    activity_id: int
    tickets_number: int = 1


class FavoriteIn(BaseModel):
    item_id: int
    item_type: str


class StubState:
    def __init__(self):
        self.users = {
            "customer-token": {"id": 1, "role": "customer"},
            "admin-token": {"id": 2, "role": "admin"},
        }
        self.activities: Dict[int, dict] = {}
        self.bookings: List[dict] = []
        self.products: Dict[int, dict] = {}
        self.favorites: List[dict] = []
        self._next_id = 1

    def next_id(self) -> int:
        value = self._next_id
        self._next_id += 1
        return value

    def add_product(self, **fields) -> dict:
        product = {
            "id": fields.pop("id", None) or self.next_id(),
            "name": "Jam",
            "description": "Strawberry jam",
            "price": 3.0,
            "category": "Preserves",
            "image_url": None,
            "is_active": True,
            "created_at": datetime.now(),
        }
        product.update(fields)
        self.products[product["id"]] = product
        return product

    def add_activity(self, **fields) -> dict:
        activity = {
            "id": fields.pop("id", None) or self.next_id(),
            "title": "Farm tour",
            "description": "Walk around the farm",
            "duration_minutes": 60,
            "price": 5.0,
            "max_capacity": 10,
            "current_capacity": 0,
            "is_active": True,
            "created_at": datetime.now(),
            "category": "Tour",
            "location": "Main gate",
            "image_url": "https://example.com/tour.jpg",
        }
        activity.update(fields)
        self.activities[activity["id"]] = activity
        return activity


def refuse(status_code: int, code: str, message: str):
    raise HTTPException(status_code=status_code, detail={"code": code, "message": message})


def create_stub_app(state: StubState) -> FastAPI:
    app = FastAPI(title="FarmVenture API stub")

    def get_current_user(authorization: Optional[str] = Header(None)):
        token = (authorization or "").replace("Bearer ", "")
        user = state.users.get(token)
        if user is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
        return user

    activities = APIRouter()

    @activities.get("/")
    def get_activities(upcoming_only: bool = Query(True), search: Optional[str] = Query(None)):
        result = [a for a in state.activities.values() if a["is_active"]]
        if upcoming_only:
            result = [a for a in result if a["date_time"] >= datetime.now()]
        if search:
            term = search.lower()
            result = [a for a in result if term in a["title"].lower() or term in a["description"].lower()]
        return sorted(result, key=lambda a: a["date_time"])

    @activities.get("/{activity_id}")
    def get_single_activity(activity_id: int):
        activity = state.activities.get(activity_id)
        if not activity:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Activity with id {activity_id} not found")
        return activity

    bookings = APIRouter()

    def with_activity(booking: dict) -> dict:
        return {**booking, "activity": state.activities.get(booking["activity_id"])}

    @bookings.post("/", status_code=status.HTTP_201_CREATED)
    def create_booking(booking: BookingIn, current_user: dict = Depends(get_current_user)):
        if current_user["role"] == "admin":
            refuse(status.HTTP_403_FORBIDDEN, "ACTOR_NOT_ALLOWED", "Admins cannot book activities.")
        activity = state.activities.get(booking.activity_id)
        if not activity:
            refuse(status.HTTP_404_NOT_FOUND, "NOT_FOUND", f"Activity with id {booking.activity_id} not found")
        if activity["date_time"] < datetime.now():
            refuse(status.HTTP_400_BAD_REQUEST, "PAST_ACTIVITY", "Cannot book past activities")
        spots = activity["max_capacity"] - activity["current_capacity"]
        if booking.tickets_number > spots:
            refuse(status.HTTP_400_BAD_REQUEST, "CAPACITY_EXCEEDED", f"Only {spots} spots remaining.")
        if any(b["user_id"] == current_user["id"] and b["activity_id"] == activity["id"] for b in state.bookings):
            refuse(status.HTTP_400_BAD_REQUEST, "ALREADY_BOOKED", "You have already booked this activity.")

        activity["current_capacity"] += booking.tickets_number
        new_booking = {
            "id": state.next_id(),
            "user_id": current_user["id"],
            "activity_id": activity["id"],
            "tickets_number": booking.tickets_number,
            "status": "upcoming",
            "booked_at": datetime.now(),
        }
        state.bookings.append(new_booking)
        return with_activity(new_booking)

    @bookings.get("/my")
    def get_my_bookings(status_filter: Optional[str] = Query(None), current_user: dict = Depends(get_current_user)):
        mine = [b for b in state.bookings if b["user_id"] == current_user["id"]]
        if status_filter:
            mine = [b for b in mine if b["status"] == status_filter]
        return [with_activity(b) for b in mine]

    @bookings.get("/{booking_id}")
    def get_booking(booking_id: int, current_user: dict = Depends(get_current_user)):
        booking = next((b for b in state.bookings if b["id"] == booking_id), None)
        if not booking:
            # plain string detail, the way the real backend answers
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Booking with id {booking_id} not found")
        return with_activity(booking)

    @bookings.delete("/{booking_id}")
    def cancel_booking(booking_id: int, current_user: dict = Depends(get_current_user)):
        booking = next((b for b in state.bookings if b["id"] == booking_id), None)
        if not booking:
            refuse(status.HTTP_404_NOT_FOUND, "NOT_FOUND", f"Booking with id {booking_id} not found")
        if current_user["role"] != "admin" and booking["user_id"] != current_user["id"]:
            refuse(status.HTTP_403_FORBIDDEN, "FORBIDDEN", "You can only cancel your own bookings")
        activity = state.activities.get(booking["activity_id"])
        if activity:
            activity["current_capacity"] = max(activity["current_capacity"] - booking["tickets_number"], 0)
        state.bookings.remove(booking)
        return {"message": f"Booking {booking_id} has been cancelled successfully"}

    products = APIRouter()

    @products.get("/products")
    def get_products(
        category: Optional[str] = Query(None),
        search: Optional[str] = Query(None),
        limit: int = Query(20, ge=1, le=100),
        offset: int = Query(0, ge=0),
    ):
        result = [p for p in state.products.values() if p["is_active"]]
        if category:
            result = [p for p in result if p["category"] == category]
        if search:
            term = search.lower()
            result = [p for p in result if term in p["name"].lower() or term in p["description"].lower()]
        result.sort(key=lambda p: p["created_at"], reverse=True)
        return result[offset:offset + limit]

    @products.get("/products/{product_id}")
    def get_product(product_id: int):
        product = state.products.get(product_id)
        if not product or not product["is_active"]:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Product with id {product_id} not found")
        return product

    favorites = APIRouter()

    @favorites.post("/favorites", status_code=status.HTTP_201_CREATED)
    def add_favorite(favorite: FavoriteIn, current_user: dict = Depends(get_current_user)):
        if favorite.item_type not in ("product", "activity"):
            refuse(status.HTTP_400_BAD_REQUEST, "VALIDATION", "item_type must be either 'product' or 'activity'")
        for existing in state.favorites:
            if (existing["user_id"], existing["item_id"], existing["item_type"]) == (current_user["id"], favorite.item_id, favorite.item_type):
                return existing
        new_favorite = {
            "id": state.next_id(),
            "user_id": current_user["id"],
            "item_id": favorite.item_id,
            "item_type": favorite.item_type,
            "created_at": datetime.now(),
        }
        state.favorites.append(new_favorite)
        return new_favorite

    @favorites.get("/favorites/ids")
    def get_favorite_ids(item_type: Optional[str] = None, current_user: dict = Depends(get_current_user)):
        result = {"products": [], "activities": []}
        for fav in state.favorites:
            if fav["user_id"] != current_user["id"]:
                continue
            if item_type and fav["item_type"] != item_type:
                continue
            result["products" if fav["item_type"] == "product" else "activities"].append(fav["item_id"])
        return result

    @favorites.delete("/favorites/{item_type}/{item_id}")
    def remove_favorite(item_type: str, item_id: int, current_user: dict = Depends(get_current_user)):
        state.favorites = [
            f for f in state.favorites
            if (f["user_id"], f["item_id"], f["item_type"]) != (current_user["id"], item_id, item_type)
        ]
        return {"message": f"{item_type.capitalize()} {item_id} removed from favorites", "success": True}

    app.include_router(products, prefix="/api", tags=["Products"])
    app.include_router(activities, prefix="/api/activities", tags=["Activities"])
    app.include_router(bookings, prefix="/api/bookings", tags=["Bookings"])
    app.include_router(favorites, prefix="/api", tags=["Favorites"])
    return app
